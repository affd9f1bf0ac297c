"""S3 → Textract → internal API extraction pipeline.

Runs inside the extraction Lambda (see :mod:`policy_crm.lambdas.pdf_processor`):

    head object → insurer + manual extras → start job → poll → blocks →
    extract → POST result to the API → delete the source PDF

Any failure is reported to the API as ``FAILED`` and then re-raised.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote, unquote_plus

import requests

from policy_crm.core.config import settings
from policy_crm.domain.pdf_upload import STATUS_FAILED, STATUS_REVIEW
from policy_crm.services.extraction import extract_policy_data
from policy_crm.services.insurer_detection import insurer_from_object
from policy_crm.services.storage import StorageService, manual_extras_from_metadata
from policy_crm.services.textract import TextractService

logger = logging.getLogger(__name__)


class BackendCallbackClient:
    """Posts extraction results to ``/api/upload/internal/by-s3key/{key}``."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        timeout: int | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or settings.backend_api_url).rstrip("/")
        self.token = token if token is not None else settings.internal_api_token
        self.timeout = timeout or settings.backend_api_timeout
        self.session = session or requests.Session()

    def url_for(self, s3_key: str) -> str:
        return f"{self.base_url}/api/upload/internal/by-s3key/{quote(s3_key, safe='')}"

    def post(self, s3_key: str, payload: dict[str, Any]) -> None:
        response = self.session.post(
            self.url_for(s3_key),
            json=payload,
            headers={"Authorization": f"Bearer {self.token or ''}"},
            timeout=self.timeout,
        )
        response.raise_for_status()

    def send_result(self, s3_key: str, extracted: dict[str, Any]) -> None:
        self.post(s3_key, {"extracted_data": extracted, "status": STATUS_REVIEW})
        logger.info("Sent extraction result for %s", s3_key)

    def send_failure(self, s3_key: str, error: str) -> None:
        self.post(s3_key, {"status": STATUS_FAILED, "error": error})


class ExtractionPipeline:
    def __init__(
        self,
        storage: StorageService | None = None,
        textract: TextractService | None = None,
        callback: BackendCallbackClient | None = None,
    ) -> None:
        self.storage = storage or StorageService()
        self.textract = textract or TextractService()
        self.callback = callback or BackendCallbackClient()

    def process_object(self, bucket: str, key: str) -> dict[str, Any]:
        logger.info("Processing PDF s3://%s/%s", bucket, key)
        try:
            metadata = self.storage.head_metadata(key, bucket)
            insurer = insurer_from_object(bucket, key, metadata)
            manual_extras = manual_extras_from_metadata(metadata)
            logger.info("Insurer %s, %d manual extras", insurer, len(manual_extras))

            job_id = self.textract.start_analysis(bucket, key)
            self.textract.wait_for_completion(job_id)
            blocks = self.textract.get_blocks(job_id)

            result = {
                **extract_policy_data(blocks, insurer),
                "manual_extras": manual_extras,
                "processed_at": datetime.now(timezone.utc).isoformat(),
                "job_id": job_id,
            }
            self.callback.send_result(key, result)
        except Exception as exc:
            logger.exception("Extraction failed for %s", key)
            try:
                self.callback.send_failure(key, str(exc))
            except requests.RequestException as cb_exc:
                logger.error("Failed to report FAILED status for %s: %s", key, cb_exc)
            raise

        self.storage.delete_object(key, bucket)
        logger.info("PDF processing completed: %s", key)
        return result

    def handle_s3_event(self, event: dict[str, Any]) -> dict[str, Any]:
        """Process every S3 ObjectCreated record; other records are skipped."""
        processed = []
        try:
            for record in event.get("Records", []):
                if record.get("eventSource") != "aws:s3":
                    continue
                if not str(record.get("eventName", "")).startswith("ObjectCreated"):
                    continue
                bucket = record["s3"]["bucket"]["name"]
                key = unquote_plus(record["s3"]["object"]["key"])
                self.process_object(bucket, key)
                processed.append(key)
        except Exception as exc:
            logger.error("Lambda execution error: %s", exc)
            return {"statusCode": 500, "body": json.dumps({"error": str(exc)})}

        return {
            "statusCode": 200,
            "body": json.dumps({"message": "PDF processing completed successfully", "processed": processed}),
        }
