"""S3 object storage: uploaded PDFs and JSON policy snapshots."""

from __future__ import annotations

import json
import logging
import secrets
import time
from typing import Any
from urllib.parse import unquote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from policy_crm.core.config import settings
from policy_crm.core.exceptions import StorageError

logger = logging.getLogger(__name__)

# Snapshot folder per policy source
_SNAPSHOT_FOLDERS = {
    "PDF_UPLOAD": "confirmed",
    "MANUAL_FORM": "manual",
    "MANUAL_GRID": "bulk",
}


def _stamp() -> tuple[int, str]:
    return int(time.time() * 1000), secrets.token_hex(4)


def build_upload_key(insurer: str, filename: str) -> str:
    """``uploads/{insurer}/{ts}_{rand}.{ext}``"""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "pdf"
    ts, rand = _stamp()
    return f"uploads/{insurer}/{ts}_{rand}.{ext}"


def build_snapshot_key(policy_id: str, source: str | None) -> str:
    """``data/policies/{confirmed|manual|bulk|other}/POL{id}_{ts}_{rand}.json``"""
    folder = _SNAPSHOT_FOLDERS.get(source or "", "other")
    ts, rand = _stamp()
    return f"data/policies/{folder}/POL{policy_id}_{ts}_{rand}.json"


def manual_extras_from_metadata(metadata: dict[str, str] | None) -> dict[str, str]:
    """Collect ``manual_*`` metadata entries with the prefix stripped and values decoded.

    Some S3 implementations hand user metadata back with ``-`` in place of
    ``_``, so both separators are accepted and field names use ``_``.
    """
    extras: dict[str, str] = {}
    for key, value in (metadata or {}).items():
        name = key.lower().replace("-", "_")
        if name.startswith("manual_") and len(name) > len("manual_"):
            extras[name[len("manual_"):]] = unquote(value)
    return extras


def metadata_value(metadata: dict[str, str] | None, name: str) -> str | None:
    """Decoded metadata value, matching ``name`` regardless of case or ``-``/``_``."""
    wanted = name.lower().replace("-", "_")
    for key, value in (metadata or {}).items():
        if key.lower().replace("-", "_") == wanted:
            return unquote(value)
    return None


class StorageService:
    def __init__(self, client: Any | None = None, bucket: str | None = None) -> None:
        self.client = client or boto3.client("s3", region_name=settings.aws_region)
        self.bucket = bucket or settings.aws_s3_bucket

    def _require_bucket(self, bucket: str | None) -> str:
        bucket = bucket or self.bucket
        if not bucket:
            raise StorageError("S3 bucket is not configured. Set AWS_S3_BUCKET.")
        return bucket

    def object_url(self, key: str, bucket: str | None = None) -> str:
        bucket = self._require_bucket(bucket)
        return f"https://{bucket}.s3.{settings.aws_region}.amazonaws.com/{key}"

    # ------------------------------------------------------------------
    # PDFs
    # ------------------------------------------------------------------

    def upload_pdf(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str = "application/pdf",
        metadata: dict[str, str] | None = None,
    ) -> str:
        bucket = self._require_bucket(None)
        try:
            self.client.put_object(
                Bucket=bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
                Metadata={k: str(v) for k, v in (metadata or {}).items()},
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 upload failed for %s: %s", key, exc)
            raise StorageError(f"Failed to upload file to S3: {exc}") from exc
        logger.info("Uploaded s3://%s/%s (%d bytes)", bucket, key, len(body))
        return self.object_url(key, bucket)

    def head_metadata(self, key: str, bucket: str | None = None) -> dict[str, str]:
        bucket = self._require_bucket(bucket)
        try:
            response = self.client.head_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"Failed to read metadata for {key}: {exc}") from exc
        return dict(response.get("Metadata") or {})

    def presigned_url(self, key: str, bucket: str | None = None) -> str:
        bucket = self._require_bucket(bucket)
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": bucket, "Key": key},
            ExpiresIn=settings.presigned_url_expires,
        )

    def delete_object(self, key: str, bucket: str | None = None) -> bool:
        """Best-effort delete; failures are logged and reported as ``False``."""
        try:
            bucket = self._require_bucket(bucket)
            self.client.delete_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError, StorageError) as exc:
            logger.warning("Failed to delete s3 object %s: %s", key, exc)
            return False
        logger.info("Deleted s3://%s/%s", bucket, key)
        return True

    # ------------------------------------------------------------------
    # JSON snapshots
    # ------------------------------------------------------------------

    def put_json(self, key: str, data: dict[str, Any]) -> None:
        bucket = self._require_bucket(None)
        try:
            self.client.put_object(
                Bucket=bucket,
                Key=key,
                Body=json.dumps(data, default=str).encode("utf-8"),
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"Failed to write {key}: {exc}") from exc

    def get_json(self, key: str) -> dict[str, Any]:
        bucket = self._require_bucket(None)
        try:
            response = self.client.get_object(Bucket=bucket, Key=key)
            return json.loads(response["Body"].read())
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"Failed to read {key}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise StorageError(f"Snapshot {key} is not valid JSON") from exc


_storage: StorageService | None = None


def get_storage() -> StorageService | None:
    """Process-wide storage client, or ``None`` when no bucket is configured."""
    global _storage
    if not settings.storage_enabled:
        return None
    if _storage is None:
        _storage = StorageService()
    return _storage
