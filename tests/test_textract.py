"""Tests for the Textract job client (start, poll loop, pagination, status check)."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from policy_crm.core.exceptions import ExtractionError, TextractJobError
from policy_crm.services.textract import TextractService
from tests.helpers import kv_blocks


def _client_error(code: str, operation: str = "GetDocumentAnalysis") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} raised"}}, operation)


@pytest.fixture
def sleeps() -> list:
    return []


@pytest.fixture
def textract_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def service(textract_client, sleeps) -> TextractService:
    return TextractService(textract_client, poll_interval=2, max_attempts=3, sleep=sleeps.append)


class TestStartAnalysis:
    def test_returns_job_id(self, service, textract_client):
        textract_client.start_document_analysis.return_value = {"JobId": "job-1"}

        assert service.start_analysis("bucket", "uploads/TATA_AIG/1_ab.pdf") == "job-1"
        kwargs = textract_client.start_document_analysis.call_args.kwargs
        assert kwargs["DocumentLocation"] == {
            "S3Object": {"Bucket": "bucket", "Name": "uploads/TATA_AIG/1_ab.pdf"}
        }
        assert kwargs["FeatureTypes"] == ["FORMS", "TABLES"]
        assert len(kwargs["JobTag"]) <= 64

    def test_client_error_becomes_extraction_error(self, service, textract_client):
        textract_client.start_document_analysis.side_effect = _client_error(
            "AccessDeniedException", "StartDocumentAnalysis"
        )
        with pytest.raises(ExtractionError):
            service.start_analysis("bucket", "key.pdf")


class TestWaitForCompletion:
    def test_returns_on_success(self, service, textract_client, sleeps):
        textract_client.get_document_analysis.side_effect = [
            {"JobStatus": "IN_PROGRESS"},
            {"JobStatus": "IN_PROGRESS"},
            {"JobStatus": "SUCCEEDED"},
        ]
        service.wait_for_completion("job-1")
        assert sleeps == [2, 2]

    def test_raises_on_failed(self, service, textract_client):
        textract_client.get_document_analysis.return_value = {"JobStatus": "FAILED"}
        with pytest.raises(TextractJobError) as exc_info:
            service.wait_for_completion("job-1")
        assert exc_info.value.job_id == "job-1"

    def test_raises_on_unknown_status(self, service, textract_client):
        textract_client.get_document_analysis.return_value = {"JobStatus": "PARTIAL_SUCCESS"}
        with pytest.raises(TextractJobError, match="Unknown Textract job status"):
            service.wait_for_completion("job-1")

    def test_times_out_after_max_attempts(self, service, textract_client, sleeps):
        textract_client.get_document_analysis.return_value = {"JobStatus": "IN_PROGRESS"}
        with pytest.raises(TextractJobError, match="timed out"):
            service.wait_for_completion("job-1")
        assert textract_client.get_document_analysis.call_count == 3
        assert len(sleeps) == 3


def test_get_blocks_follows_next_token(service, textract_client):
    textract_client.get_document_analysis.side_effect = [
        {"Blocks": [{"Id": "a"}], "NextToken": "page-2"},
        {"Blocks": [{"Id": "b"}, {"Id": "c"}]},
    ]
    blocks = service.get_blocks("job-1")

    assert [b["Id"] for b in blocks] == ["a", "b", "c"]
    second_call = textract_client.get_document_analysis.call_args_list[1]
    assert second_call.kwargs == {"JobId": "job-1", "NextToken": "page-2"}


class TestCheckJob:
    def test_invalid_job_id(self, service, textract_client):
        textract_client.get_document_analysis.side_effect = _client_error("InvalidJobIdException")
        result = service.check_job("job-x")
        assert result["status"] == "FAILED"
        assert result["progress"] == 0
        assert "Invalid job ID" in result["error"]

    def test_other_client_errors_raise(self, service, textract_client):
        textract_client.get_document_analysis.side_effect = _client_error("ThrottlingException")
        with pytest.raises(ExtractionError):
            service.check_job("job-x")

    def test_in_progress_reports_progress(self, service, textract_client):
        textract_client.get_document_analysis.return_value = {
            "JobStatus": "IN_PROGRESS", "ProgressPercent": 40,
        }
        assert service.check_job("job-1") == {"job_id": "job-1", "status": "IN_PROGRESS", "progress": 40}

    def test_failed_carries_status_message(self, service, textract_client):
        textract_client.get_document_analysis.return_value = {
            "JobStatus": "FAILED", "StatusMessage": "Unsupported document",
        }
        result = service.check_job("job-1")
        assert result["error"] == "Unsupported document"

    def test_succeeded_returns_extracted_data(self, service, textract_client):
        blocks = kv_blocks({"Policy Number": "P-1", "Total Premium": "9,000"})
        textract_client.get_document_analysis.return_value = {"JobStatus": "SUCCEEDED", "Blocks": blocks}

        result = service.check_job("job-1", "DIGIT")

        assert result["progress"] == 100
        assert result["extracted_data"]["policy_number"] == "P-1"
        assert result["extracted_data"]["total_premium"] == 9000.0
        assert result["extracted_data"]["insurer"] == "DIGIT"
        assert result["extracted_data"]["ocr_confidence"] == 0.0
