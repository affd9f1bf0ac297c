"""Tests for the S3 → Textract → API extraction pipeline and its Lambda entry point."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from policy_crm.core.exceptions import ExtractionError, TextractJobError
from policy_crm.services.pipeline import BackendCallbackClient, ExtractionPipeline
from tests.helpers import kv_blocks

KEY = "uploads/DIGIT/1700000000000_ab12cd34.pdf"


@pytest.fixture
def http_session() -> MagicMock:
    return MagicMock()


@pytest.fixture
def storage() -> MagicMock:
    storage = MagicMock()
    storage.head_metadata.return_value = {"insurer": "DIGIT", "manual_executive": "Asha"}
    return storage


@pytest.fixture
def textract() -> MagicMock:
    textract = MagicMock()
    textract.start_analysis.return_value = "job-1"
    textract.get_blocks.return_value = kv_blocks({
        "Policy Number": "D-42",
        "Vehicle Number": "KA05MN4321",
        "Total Premium": "8,400",
    })
    return textract


@pytest.fixture
def pipeline(storage, textract, http_session) -> ExtractionPipeline:
    callback = BackendCallbackClient("http://api.local/", "tok", timeout=5, session=http_session)
    return ExtractionPipeline(storage, textract, callback)


def _posted(http_session: MagicMock) -> tuple[str, dict, dict]:
    call = http_session.post.call_args
    return call.args[0], call.kwargs["json"], call.kwargs["headers"]


class TestBackendCallbackClient:
    def test_url_encodes_the_whole_key(self):
        client = BackendCallbackClient("http://api.local/", "tok", session=MagicMock())
        assert client.url_for(KEY) == (
            "http://api.local/api/upload/internal/by-s3key/"
            "uploads%2FDIGIT%2F1700000000000_ab12cd34.pdf"
        )

    def test_http_errors_propagate(self, http_session):
        http_session.post.return_value.raise_for_status.side_effect = requests.HTTPError("500")
        client = BackendCallbackClient("http://api.local", "tok", session=http_session)
        with pytest.raises(requests.HTTPError):
            client.send_failure(KEY, "boom")


class TestProcessObject:
    def test_success_posts_review_result_and_deletes_pdf(self, pipeline, storage, textract, http_session):
        result = pipeline.process_object("bucket", KEY)

        textract.start_analysis.assert_called_once_with("bucket", KEY)
        textract.wait_for_completion.assert_called_once_with("job-1")
        url, payload, headers = _posted(http_session)
        assert url.endswith("uploads%2FDIGIT%2F1700000000000_ab12cd34.pdf")
        assert headers["Authorization"] == "Bearer tok"
        assert payload["status"] == "REVIEW"
        extracted = payload["extracted_data"]
        assert extracted["policy_number"] == "D-42"
        assert extracted["insurer"] == "DIGIT"
        assert extracted["manual_extras"] == {"executive": "Asha"}
        assert extracted["job_id"] == "job-1"
        assert result["confidence_score"] == 0.7
        storage.delete_object.assert_called_once_with(KEY, "bucket")

    def test_failure_reports_failed_and_reraises(self, pipeline, storage, textract, http_session):
        textract.wait_for_completion.side_effect = TextractJobError("job-1", "Textract job job-1 failed")

        with pytest.raises(TextractJobError):
            pipeline.process_object("bucket", KEY)

        _, payload, _ = _posted(http_session)
        assert payload == {"status": "FAILED", "error": "Textract job job-1 failed"}
        storage.delete_object.assert_not_called()

    def test_unreachable_api_does_not_mask_original_error(self, pipeline, textract, http_session):
        textract.start_analysis.side_effect = ExtractionError("Failed to start Textract job: denied")
        http_session.post.side_effect = requests.ConnectionError("api down")

        with pytest.raises(ExtractionError):
            pipeline.process_object("bucket", KEY)


def _record(source="aws:s3", name="ObjectCreated:Put", key=KEY):
    return {
        "eventSource": source,
        "eventName": name,
        "s3": {"bucket": {"name": "bucket"}, "object": {"key": key}},
    }


class TestHandleS3Event:
    def test_only_object_created_s3_records_are_processed(self, pipeline):
        pipeline.process_object = MagicMock()
        event = {
            "Records": [
                _record(key="uploads/TATA_AIG/my+policy%281%29.pdf"),
                _record(source="aws:sqs"),
                _record(name="ObjectRemoved:Delete"),
            ]
        }
        response = pipeline.handle_s3_event(event)

        pipeline.process_object.assert_called_once_with("bucket", "uploads/TATA_AIG/my policy(1).pdf")
        assert response["statusCode"] == 200
        assert json.loads(response["body"])["processed"] == ["uploads/TATA_AIG/my policy(1).pdf"]

    def test_errors_return_500(self, pipeline):
        pipeline.process_object = MagicMock(side_effect=ExtractionError("boom"))
        response = pipeline.handle_s3_event({"Records": [_record()]})
        assert response == {"statusCode": 500, "body": json.dumps({"error": "boom"})}


def test_lambda_handler_delegates_to_pipeline(monkeypatch):
    from policy_crm.lambdas import pdf_processor

    fake = MagicMock()
    fake.handle_s3_event.return_value = {"statusCode": 200, "body": json.dumps({"processed": []})}
    monkeypatch.setattr(pdf_processor, "_pipeline", fake)

    event = {"Records": []}
    assert pdf_processor.handler(event, None)["statusCode"] == 200
    fake.handle_s3_event.assert_called_once_with(event)
