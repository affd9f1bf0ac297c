"""Textract asynchronous document-analysis jobs: start, poll at a fixed interval, fetch."""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Callable

import boto3
from botocore.exceptions import ClientError

from policy_crm.core.config import settings
from policy_crm.core.exceptions import ExtractionError, TextractJobError
from policy_crm.services.extraction import extract_policy_data, ocr_confidence

logger = logging.getLogger(__name__)

STATUS_IN_PROGRESS = "IN_PROGRESS"
STATUS_SUCCEEDED = "SUCCEEDED"
STATUS_FAILED = "FAILED"


def _job_tag(key: str) -> str:
    # JobTag allows [a-zA-Z0-9_.\-:] and at most 64 chars
    return ("pdf_" + re.sub(r"[^a-zA-Z0-9]", "_", key))[:64]


class TextractService:
    """Wraps StartDocumentAnalysis / GetDocumentAnalysis.

    ``client`` and ``sleep`` are injectable so the poll loop can be driven
    without AWS or real waiting.
    """

    def __init__(
        self,
        client: Any | None = None,
        *,
        poll_interval: float | None = None,
        max_attempts: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client or boto3.client("textract", region_name=settings.aws_region)
        self.poll_interval = settings.textract_poll_interval if poll_interval is None else poll_interval
        self.max_attempts = settings.textract_max_attempts if max_attempts is None else max_attempts
        self._sleep = sleep

    def start_analysis(self, bucket: str, key: str) -> str:
        try:
            response = self.client.start_document_analysis(
                DocumentLocation={"S3Object": {"Bucket": bucket, "Name": key}},
                FeatureTypes=["FORMS", "TABLES"],
                JobTag=_job_tag(key),
            )
        except ClientError as exc:
            msg = exc.response.get("Error", {}).get("Message", str(exc))
            logger.error("StartDocumentAnalysis failed for s3://%s/%s: %s", bucket, key, msg)
            raise ExtractionError(f"Failed to start Textract job: {msg}") from exc
        job_id = response["JobId"]
        logger.info("Textract job started: %s (s3://%s/%s)", job_id, bucket, key)
        return job_id

    def get_status(self, job_id: str) -> str:
        response = self.client.get_document_analysis(JobId=job_id, MaxResults=1)
        return response.get("JobStatus", "UNKNOWN")

    def wait_for_completion(self, job_id: str) -> None:
        """Poll until SUCCEEDED; FAILED, an unknown status, or running out of attempts raise."""
        for attempt in range(1, self.max_attempts + 1):
            status = self.get_status(job_id)
            if status == STATUS_SUCCEEDED:
                logger.info("Textract job %s succeeded after %d checks", job_id, attempt)
                return
            if status == STATUS_FAILED:
                raise TextractJobError(job_id, f"Textract job {job_id} failed")
            if status != STATUS_IN_PROGRESS:
                raise TextractJobError(job_id, f"Unknown Textract job status: {status}")
            logger.debug("Textract job %s in progress (attempt %d/%d)", job_id, attempt, self.max_attempts)
            self._sleep(self.poll_interval)

        raise TextractJobError(
            job_id, f"Textract job {job_id} timed out after {self.max_attempts} attempts"
        )

    def get_blocks(self, job_id: str) -> list[dict[str, Any]]:
        """Fetch every result page, following ``NextToken``."""
        blocks: list[dict[str, Any]] = []
        next_token = None
        while True:
            params: dict[str, Any] = {"JobId": job_id}
            if next_token:
                params["NextToken"] = next_token
            response = self.client.get_document_analysis(**params)
            blocks.extend(response.get("Blocks", []))
            next_token = response.get("NextToken")
            if not next_token:
                break
        logger.info("Fetched %d blocks for Textract job %s", len(blocks), job_id)
        return blocks

    def check_job(self, job_id: str, insurer: str | None = None) -> dict[str, Any]:
        """Non-blocking status for the API: status, progress, and data once finished."""
        try:
            response = self.client.get_document_analysis(JobId=job_id)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code == "InvalidJobIdException":
                return {
                    "job_id": job_id,
                    "status": STATUS_FAILED,
                    "progress": 0,
                    "error": "Invalid job ID - job may have expired or been deleted",
                }
            logger.error("GetDocumentAnalysis failed for %s: %s", job_id, exc)
            raise ExtractionError(f"Failed to check Textract job: {exc}") from exc

        status = response.get("JobStatus", "UNKNOWN")
        if status == STATUS_SUCCEEDED:
            blocks = response.get("Blocks", [])
            if response.get("NextToken"):
                blocks = self.get_blocks(job_id)
            data = extract_policy_data(blocks, insurer)
            data["ocr_confidence"] = ocr_confidence(blocks)
            return {"job_id": job_id, "status": status, "progress": 100, "extracted_data": data}
        if status == STATUS_FAILED:
            return {
                "job_id": job_id,
                "status": status,
                "progress": 0,
                "error": response.get("StatusMessage") or "Unknown error occurred",
            }
        return {"job_id": job_id, "status": status, "progress": int(response.get("ProgressPercent", 0) or 0)}
