"""Work queue on Amazon SQS.

Payloads are base64-encoded JSON ``WorkMessage``s. Delivery is at-least-once:
a received message stays invisible for the visibility timeout and reappears
unless it is deleted (acknowledged). After ``maxReceiveCount`` receives the
queue's redrive policy moves it to the dead-letter (poison) queue.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from docpipe.config import PipelineConfig
from docpipe.errors import TransientStoreError
from docpipe.models import WorkMessage

logger = logging.getLogger(__name__)

_SQS_MAX_BATCH = 10


def build_sqs_client(cfg: PipelineConfig) -> Any:
    # Read timeout must outlast the long-poll wait
    config = Config(
        connect_timeout=5,
        read_timeout=cfg.wait_time_seconds + 10,
        retries={"max_attempts": 3, "mode": "standard"},
    )
    return boto3.client("sqs", region_name=cfg.aws_region, endpoint_url=cfg.sqs_endpoint, config=config)


@dataclass(frozen=True)
class Delivery:
    """One received copy of a queue message."""

    message_id: str
    receipt_handle: str
    body: str
    receive_count: int


class WorkQueue:
    def __init__(self, *, client: Any, queue_name: str, queue_url: str | None = None) -> None:
        self._sqs = client
        self._queue_name = queue_name
        self._queue_url = queue_url

    @classmethod
    def from_config(cls, cfg: PipelineConfig, client: Any | None = None) -> WorkQueue:
        return cls(
            client=client or build_sqs_client(cfg),
            queue_name=cfg.queue_name,
            queue_url=cfg.queue_url,
        )

    @property
    def queue_url(self) -> str:
        if self._queue_url is None:
            try:
                resp = self._sqs.get_queue_url(QueueName=self._queue_name)
            except (BotoCoreError, ClientError) as e:
                raise TransientStoreError(f"Cannot resolve queue '{self._queue_name}': {e}") from e
            self._queue_url = resp["QueueUrl"]
        return self._queue_url

    def send(self, message: WorkMessage) -> str:
        """Enqueue one message; returns the queue's message id."""
        try:
            resp = self._sqs.send_message(QueueUrl=self.queue_url, MessageBody=message.encode())
        except (BotoCoreError, ClientError) as e:
            raise TransientStoreError(f"Failed to enqueue '{message.doc_id}': {e}") from e
        return str(resp.get("MessageId", ""))

    def receive(
        self,
        *,
        max_messages: int,
        wait_seconds: int,
        visibility_timeout: int,
    ) -> list[Delivery]:
        try:
            resp = self._sqs.receive_message(
                QueueUrl=self.queue_url,
                MaxNumberOfMessages=max(1, min(max_messages, _SQS_MAX_BATCH)),
                WaitTimeSeconds=wait_seconds,
                VisibilityTimeout=visibility_timeout,
                MessageSystemAttributeNames=["ApproximateReceiveCount"],
            )
        except (BotoCoreError, ClientError) as e:
            raise TransientStoreError(f"Failed to receive from '{self._queue_name}': {e}") from e

        out: list[Delivery] = []
        for m in resp.get("Messages", []):
            attrs = m.get("Attributes") or {}
            out.append(
                Delivery(
                    message_id=m["MessageId"],
                    receipt_handle=m["ReceiptHandle"],
                    body=m.get("Body", ""),
                    receive_count=int(attrs.get("ApproximateReceiveCount", "1")),
                )
            )
        return out

    def ack(self, delivery: Delivery) -> None:
        """Delete a processed message so it is not redelivered."""
        try:
            self._sqs.delete_message(QueueUrl=self.queue_url, ReceiptHandle=delivery.receipt_handle)
        except (BotoCoreError, ClientError) as e:
            raise TransientStoreError(f"Failed to acknowledge {delivery.message_id}: {e}") from e

    def ensure(
        self,
        *,
        dead_letter_queue_name: str,
        max_receive_count: int,
        visibility_timeout: int,
    ) -> str:
        """Create the queue and its dead-letter queue (idempotent); returns the queue URL."""
        try:
            dlq_url = self._sqs.create_queue(QueueName=dead_letter_queue_name)["QueueUrl"]
            dlq_arn = self._sqs.get_queue_attributes(
                QueueUrl=dlq_url, AttributeNames=["QueueArn"]
            )["Attributes"]["QueueArn"]

            url = self._sqs.create_queue(QueueName=self._queue_name)["QueueUrl"]
            self._sqs.set_queue_attributes(
                QueueUrl=url,
                Attributes={
                    "VisibilityTimeout": str(visibility_timeout),
                    "RedrivePolicy": json.dumps(
                        {"deadLetterTargetArn": dlq_arn, "maxReceiveCount": str(max_receive_count)}
                    ),
                },
            )
        except (BotoCoreError, ClientError) as e:
            raise TransientStoreError(f"Failed to provision queue '{self._queue_name}': {e}") from e

        self._queue_url = url
        logger.info(
            "Queue %s ready (dead-letter=%s, maxReceiveCount=%d)",
            self._queue_name,
            dead_letter_queue_name,
            max_receive_count,
        )
        return url
