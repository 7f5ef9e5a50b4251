from __future__ import annotations

import asyncio
import logging

from docpipe.errors import TransientStoreError
from docpipe.ingestion.types import WorkerStage
from docpipe.ingestion.worker import DocumentWorker
from docpipe.stores.work_queue import Delivery, WorkQueue

logger = logging.getLogger(__name__)


class QueueListener:
    """Host loop feeding queue deliveries to the document worker.

    A delivery is acknowledged only after the worker returned, which means
    its result record is already stored. A failed attempt is left on the
    queue: it becomes visible again after the visibility timeout and, past
    ``max_receive_count`` receives, the queue moves it to the poison queue.
    """

    def __init__(
        self,
        *,
        queue: WorkQueue,
        worker: DocumentWorker,
        concurrency: int,
        wait_seconds: int,
        visibility_timeout: int,
        max_receive_count: int,
    ) -> None:
        self._queue = queue
        self._worker = worker
        self._concurrency = max(1, concurrency)
        self._wait_seconds = wait_seconds
        self._visibility_timeout = visibility_timeout
        self._max_receive_count = max_receive_count
        self._stopping = False

    def stop(self) -> None:
        self._stopping = True

    async def run(self, *, once: bool = False, max_messages: int = 0) -> dict[str, int]:
        """Poll until stopped. ``once`` does a single receive; ``max_messages`` caps deliveries."""
        totals = {"received": 0, "completed": 0, "failed": 0}
        sem = asyncio.Semaphore(self._concurrency)
        receive_failures = 0

        async def bounded(d: Delivery) -> WorkerStage:
            async with sem:
                return await self.handle(d)

        logger.info("Listener started (concurrency=%d)", self._concurrency)
        while not self._stopping:
            batch = self._concurrency
            if max_messages:
                batch = min(batch, max_messages - totals["received"])

            try:
                deliveries = await asyncio.to_thread(
                    self._queue.receive,
                    max_messages=batch,
                    wait_seconds=self._wait_seconds,
                    visibility_timeout=self._visibility_timeout,
                )
                receive_failures = 0
            except TransientStoreError as e:
                receive_failures += 1
                logger.warning("Queue receive failed, will retry: %s", e)
                if once:
                    break
                await asyncio.sleep(min(2**receive_failures, 30))
                continue

            if deliveries:
                outcomes = await asyncio.gather(*[bounded(d) for d in deliveries])
                totals["received"] += len(deliveries)
                totals["completed"] += sum(1 for o in outcomes if o is not WorkerStage.FAILED)
                totals["failed"] += sum(1 for o in outcomes if o is WorkerStage.FAILED)
            else:
                logger.debug("No messages available")

            if once or (max_messages and totals["received"] >= max_messages):
                break

        logger.info("Listener stopped totals=%s", totals)
        return totals

    async def handle(self, delivery: Delivery) -> WorkerStage:
        extra = {"message_id": delivery.message_id, "receive_count": delivery.receive_count}
        try:
            record = await self._worker.handle_delivery(
                delivery.body,
                message_id=delivery.message_id,
                receive_count=delivery.receive_count,
            )
        except Exception as e:
            if delivery.receive_count >= self._max_receive_count:
                logger.error(
                    "Message %s failed on final attempt %d/%d and goes to the poison queue: %s: %s",
                    delivery.message_id,
                    delivery.receive_count,
                    self._max_receive_count,
                    type(e).__name__,
                    e,
                    extra=extra,
                )
            else:
                logger.warning(
                    "Message %s failed (attempt %d/%d), leaving it for redelivery: %s: %s",
                    delivery.message_id,
                    delivery.receive_count,
                    self._max_receive_count,
                    type(e).__name__,
                    e,
                    extra=extra,
                )
            return WorkerStage.FAILED

        try:
            await asyncio.to_thread(self._queue.ack, delivery)
        except TransientStoreError as e:
            # Result is stored; the redelivered copy will overwrite it identically.
            logger.warning("Processed %s but acknowledgement failed: %s", record.doc_id, e, extra=extra)
            return WorkerStage.PERSISTING

        logger.info("Acknowledged %s", record.doc_id, extra={**extra, "doc_id": record.doc_id})
        return WorkerStage.ACKNOWLEDGED
