"""
PDF processor Lambda handler.

Trigger: S3 ``ObjectCreated`` notifications on the uploads prefix.
Output: POST to the API's internal upload endpoint (see
:class:`policy_crm.services.pipeline.BackendCallbackClient`).

Environment: ``AWS_REGION``, ``BACKEND_API_URL``, ``INTERNAL_API_TOKEN``,
``TEXTRACT_POLL_INTERVAL``, ``TEXTRACT_MAX_ATTEMPTS``.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from policy_crm.services.pipeline import ExtractionPipeline

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logging.getLogger("botocore").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

_pipeline: ExtractionPipeline | None = None


def _get_pipeline() -> ExtractionPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = ExtractionPipeline()
    return _pipeline


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    logger.info("Lambda triggered with %d record(s)", len(event.get("Records", [])))
    return _get_pipeline().handle_s3_event(event)
