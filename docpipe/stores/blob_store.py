"""Upload and result stores on Google Cloud Storage.

Raw uploads live in one bucket keyed by document id; result records live in a
second bucket keyed by ``<doc id>.json``. Every call is a single-object
operation. SDK errors are wrapped as ``TransientStoreError``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from google.api_core import exceptions as gexc
from google.auth.credentials import AnonymousCredentials
from google.cloud import storage

from docpipe.config import PipelineConfig
from docpipe.errors import TransientStoreError, UploadMissingError
from docpipe.identity import RESULT_SUFFIX, result_key

logger = logging.getLogger(__name__)


def gs_uri(bucket: str, name: str) -> str:
    return f"gs://{bucket}/{name}"


def build_storage_client(cfg: PipelineConfig) -> storage.Client:
    """Storage client for the configured project, or for a custom endpoint (emulator)."""
    if cfg.storage_endpoint:
        return storage.Client(
            project=cfg.gcp_project or "docpipe-local",
            credentials=AnonymousCredentials(),
            client_options={"api_endpoint": cfg.storage_endpoint},
        )
    return storage.Client(project=cfg.gcp_project)


@dataclass(frozen=True)
class BlobInfo:
    name: str
    size: int | None
    created_on: datetime | None
    last_modified: datetime | None


class BlobStore:
    def __init__(self, *, client: storage.Client, upload_bucket: str, result_bucket: str) -> None:
        self._client = client
        self._upload_bucket = upload_bucket
        self._result_bucket = result_bucket

    @classmethod
    def from_config(cls, cfg: PipelineConfig, client: storage.Client | None = None) -> BlobStore:
        return cls(
            client=client or build_storage_client(cfg),
            upload_bucket=cfg.upload_bucket,
            result_bucket=cfg.result_bucket,
        )

    # -- Uploads ---------------------------------------------------------------

    def put_upload(self, doc_id: str, data: bytes, *, content_type: str | None) -> None:
        blob = self._client.bucket(self._upload_bucket).blob(doc_id)
        try:
            blob.upload_from_string(data, content_type=content_type or "application/octet-stream")
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(
                f"Failed to write {gs_uri(self._upload_bucket, doc_id)}: {e}"
            ) from e

    def get_upload(self, doc_id: str) -> bytes:
        blob = self._client.bucket(self._upload_bucket).blob(doc_id)
        try:
            return blob.download_as_bytes()
        except gexc.NotFound as e:
            raise UploadMissingError(doc_id) from e
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(
                f"Failed to read {gs_uri(self._upload_bucket, doc_id)}: {e}"
            ) from e

    def delete_upload(self, doc_id: str) -> None:
        """Remove a raw upload; an already missing blob is not an error."""
        blob = self._client.bucket(self._upload_bucket).blob(doc_id)
        try:
            blob.delete()
        except gexc.NotFound:
            return
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(
                f"Failed to delete {gs_uri(self._upload_bucket, doc_id)}: {e}"
            ) from e

    def upload_exists(self, doc_id: str) -> bool:
        return self._exists(self._upload_bucket, doc_id)

    # -- Results ---------------------------------------------------------------

    def put_result(self, doc_id: str, payload: str) -> None:
        """Write (or overwrite) the result record for ``doc_id``."""
        key = result_key(doc_id)
        blob = self._client.bucket(self._result_bucket).blob(key)
        try:
            blob.upload_from_string(payload.encode("utf-8"), content_type="application/json")
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(
                f"Failed to write {gs_uri(self._result_bucket, key)}: {e}"
            ) from e

    def get_result(self, doc_id: str) -> dict[str, Any] | None:
        """Stored record as a plain dict, or None if there is none yet."""
        key = result_key(doc_id)
        blob = self._client.bucket(self._result_bucket).blob(key)
        try:
            raw = blob.download_as_bytes()
        except gexc.NotFound:
            return None
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(
                f"Failed to read {gs_uri(self._result_bucket, key)}: {e}"
            ) from e
        return json.loads(raw.decode("utf-8"))

    def list_results(self) -> list[BlobInfo]:
        """All result records. A missing result bucket lists as empty."""
        out: list[BlobInfo] = []
        try:
            for b in self._client.list_blobs(self._result_bucket):
                if not b.name.endswith(RESULT_SUFFIX):
                    continue
                out.append(
                    BlobInfo(
                        name=b.name,
                        size=b.size,
                        created_on=b.time_created,
                        last_modified=b.updated,
                    )
                )
        except gexc.NotFound:
            logger.info("Result bucket '%s' does not exist yet", self._result_bucket)
            return []
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(f"Failed to list {self._result_bucket}: {e}") from e
        return out

    # -- Health ----------------------------------------------------------------

    def check(self) -> bool:
        """True when the upload bucket is reachable."""
        try:
            return bool(self._client.bucket(self._upload_bucket).exists())
        except Exception as e:
            logger.warning("Storage health check failed: %s", e)
            return False

    def _exists(self, bucket: str, name: str) -> bool:
        try:
            return bool(self._client.bucket(bucket).blob(name).exists())
        except gexc.GoogleAPIError as e:
            raise TransientStoreError(f"Failed to stat {gs_uri(bucket, name)}: {e}") from e
