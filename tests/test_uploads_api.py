"""API tests for the PDF upload lifecycle and the internal Lambda callbacks."""

from unittest.mock import MagicMock
from urllib.parse import quote

import pytest

from policy_crm.routers.uploads import get_textract
from policy_crm.services import upload as upload_service
from policy_crm.services.pipeline import ExtractionPipeline
from policy_crm.services.storage import metadata_value
from policy_crm.services.textract import TextractService
from tests.conftest import BUCKET, INTERNAL_HEADERS
from tests.helpers import kv_blocks

PDF = ("policy.pdf", b"%PDF-1.4 test document", "application/pdf")


@pytest.fixture(autouse=True)
def no_pdf_parsing(monkeypatch):
    async def keep_selected(content, selected):
        return selected

    monkeypatch.setattr(upload_service, "detect_insurer", keep_selected)


@pytest.fixture
def uploaded(storage_client, ops_headers) -> dict:
    response = storage_client.post(
        "/api/upload/pdf",
        files={"pdf": PDF},
        data={"insurer": "DIGIT", "manual_executive": "Asha", "manual_caller_name": "Kiran"},
        headers=ops_headers,
    )
    assert response.status_code == 201
    return response.json()["data"]


def _internal_url(s3_key: str, suffix: str = "") -> str:
    return f"/api/upload/internal/by-s3key/{quote(s3_key, safe='')}{suffix}"


def _extracted(**overrides) -> dict:
    data = {
        "policy_number": "D-777",
        "vehicle_number": "KA03XY9999",
        "insurer": "DIGIT",
        "total_premium": 9000.0,
        "cashback": 900.0,
        "source": "PDF_UPLOAD",
        "confidence_score": 0.9,
        "job_id": "job-9",
    }
    return {**data, **overrides}


class TestUploadPdf:
    def test_upload_stores_object_and_row(self, uploaded, s3_client):
        assert uploaded["status"] == "UPLOADED"
        assert uploaded["insurer"] == "DIGIT"
        assert uploaded["s3_key"].startswith("uploads/DIGIT/")
        assert uploaded["manual_extras"] == {"executive": "Asha", "caller_name": "Kiran"}

        metadata = s3_client.head_object(Bucket=BUCKET, Key=uploaded["s3_key"])["Metadata"]
        assert metadata_value(metadata, "insurer") == "DIGIT"
        assert metadata_value(metadata, "manual_executive") == "Asha"

    def test_rejects_other_file_types(self, storage_client, ops_headers):
        response = storage_client.post(
            "/api/upload/pdf",
            files={"pdf": ("notes.txt", b"hello", "text/plain")},
            data={"insurer": "DIGIT"},
            headers=ops_headers,
        )
        assert response.status_code == 400

    def test_requires_insurer(self, storage_client, ops_headers):
        response = storage_client.post("/api/upload/pdf", files={"pdf": PDF}, headers=ops_headers)
        assert response.status_code == 400

    def test_without_bucket_is_storage_error(self, client, ops_headers):
        response = client.post(
            "/api/upload/pdf", files={"pdf": PDF}, data={"insurer": "DIGIT"}, headers=ops_headers
        )
        assert response.status_code == 502
        assert response.json()["code"] == "STORAGE_ERROR"


class TestUserEndpoints:
    def test_list_get_and_status(self, storage_client, ops_headers, uploaded):
        listing = storage_client.get("/api/upload", params={"status": "UPLOADED"}, headers=ops_headers).json()
        assert [u["id"] for u in listing["data"]] == [uploaded["id"]]

        one = storage_client.get(f"/api/upload/{uploaded['id']}", headers=ops_headers).json()["data"]
        assert one["filename"] == "policy.pdf"
        assert uploaded["s3_key"] in one["download_url"]

        status = storage_client.get(f"/api/upload/{uploaded['id']}/status", headers=ops_headers).json()["data"]
        assert status == {
            "id": uploaded["id"],
            "status": "UPLOADED",
            "confidence_score": None,
            "error_message": None,
            "policy_id": None,
            "updated_at": status["updated_at"],
        }

    def test_retry_only_from_failed(self, storage_client, ops_headers, uploaded):
        upload_id = uploaded["id"]
        assert storage_client.post(f"/api/upload/{upload_id}/retry", headers=ops_headers).status_code == 400

        storage_client.post(
            _internal_url(uploaded["s3_key"], "/failed"),
            json={"error_message": "Textract job failed"},
            headers=INTERNAL_HEADERS,
        )
        retried = storage_client.post(f"/api/upload/{upload_id}/retry", headers=ops_headers).json()["data"]

        assert retried["status"] == "UPLOADED"
        assert retried["error_message"] is None

    def test_job_status_uses_textract(self, app, storage_client, ops_headers, uploaded):
        no_job = storage_client.get(f"/api/upload/{uploaded['id']}/job-status", headers=ops_headers)
        assert no_job.status_code == 400

        storage_client.post(
            _internal_url(uploaded["s3_key"]),
            json={"status": "PROCESSING", "extracted_data": {"job_id": "job-5"}},
            headers=INTERNAL_HEADERS,
        )
        textract_client = MagicMock()
        textract_client.get_document_analysis.return_value = {
            "JobStatus": "SUCCEEDED",
            "Blocks": kv_blocks({"Policy Number": "D-5"}),
        }
        app.dependency_overrides[get_textract] = lambda: TextractService(textract_client)

        result = storage_client.get(f"/api/upload/{uploaded['id']}/job-status", headers=ops_headers).json()["data"]

        textract_client.get_document_analysis.assert_called_once_with(JobId="job-5")
        assert result["status"] == "SUCCEEDED"
        assert result["progress"] == 100
        assert result["extracted_data"]["policy_number"] == "D-5"

    def test_delete_removes_object(self, storage_client, ops_headers, uploaded, s3_client):
        response = storage_client.delete(f"/api/upload/{uploaded['id']}", headers=ops_headers)

        assert response.status_code == 200
        assert s3_client.list_objects_v2(Bucket=BUCKET).get("KeyCount") == 0
        assert storage_client.get(f"/api/upload/{uploaded['id']}", headers=ops_headers).status_code == 404


class TestConfirm:
    def test_confirm_merges_extracted_extras_and_edits(self, storage_client, ops_headers, uploaded):
        storage_client.post(
            _internal_url(uploaded["s3_key"]),
            json={"status": "REVIEW", "extracted_data": _extracted(confidence_score=0.6)},
            headers=INTERNAL_HEADERS,
        )

        response = storage_client.post(
            f"/api/upload/{uploaded['id']}/confirm",
            json={"edited_data": {"vehicle_number": "KA03XY0001"}},
            headers=ops_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["upload"]["status"] == "COMPLETED"
        assert data["upload"]["policy_id"] == data["policy_id"]

        policy = storage_client.get(f"/api/policies/{data['policy_id']}", headers=ops_headers).json()["data"]
        assert policy["source"] == "PDF_UPLOAD"
        assert policy["vehicle_number"] == "KA03XY0001"
        assert policy["executive"] == "Asha"
        assert policy["cashback_amount"] == 900
        assert policy["cashback_percentage"] == 10
        assert policy["confidence_score"] == 0.6
        assert policy["s3_key"].startswith("data/policies/confirmed/")

    def test_confirm_twice_is_rejected(self, storage_client, ops_headers, uploaded):
        storage_client.post(
            _internal_url(uploaded["s3_key"]),
            json={"status": "REVIEW", "extracted_data": _extracted()},
            headers=INTERNAL_HEADERS,
        )
        assert storage_client.post(f"/api/upload/{uploaded['id']}/confirm", headers=ops_headers).status_code == 200
        assert storage_client.post(f"/api/upload/{uploaded['id']}/confirm", headers=ops_headers).status_code == 400

    def test_confirm_with_incomplete_data_fails_validation(self, storage_client, ops_headers, uploaded):
        response = storage_client.post(f"/api/upload/{uploaded['id']}/confirm", headers=ops_headers)
        assert response.status_code == 400
        assert "Policy number is required" in response.json()["errors"]


class TestInternalEndpoints:
    def test_requires_internal_token(self, storage_client, uploaded):
        url = _internal_url(uploaded["s3_key"])
        assert storage_client.get(url).status_code == 401
        assert storage_client.get(url, headers={"x-internal-token": "wrong"}).status_code == 401
        assert storage_client.get(url, headers={"Authorization": "Bearer test-internal-token"}).status_code == 200

    def test_update_merges_extracted_data(self, storage_client, uploaded):
        url = _internal_url(uploaded["s3_key"])
        storage_client.post(url, json={"extracted_data": {"policy_number": "D-1"}}, headers=INTERNAL_HEADERS)
        response = storage_client.post(
            url,
            json={"status": "REVIEW", "extracted_data": {"total_premium": 5000, "confidence_score": 0.5}},
            headers=INTERNAL_HEADERS,
        )

        data = response.json()["data"]
        assert data["status"] == "REVIEW"
        assert data["extracted_data"] == {"policy_number": "D-1", "total_premium": 5000, "confidence_score": 0.5}
        assert data["confidence_score"] == 0.5

    def test_unknown_status_is_rejected(self, storage_client, uploaded):
        response = storage_client.post(
            _internal_url(uploaded["s3_key"]), json={"status": "DONE"}, headers=INTERNAL_HEADERS
        )
        assert response.status_code == 400

    def test_unknown_key_is_404(self, storage_client):
        assert storage_client.get(_internal_url("uploads/none.pdf"), headers=INTERNAL_HEADERS).status_code == 404

    def test_mark_failed(self, storage_client, uploaded):
        response = storage_client.post(
            _internal_url(uploaded["s3_key"], "/failed"),
            json={"error_message": "Textract job failed"},
            headers=INTERNAL_HEADERS,
        )
        data = response.json()["data"]
        assert data["status"] == "FAILED"
        assert data["error_message"] == "Textract job failed"

    def test_parsed_above_threshold_auto_creates_policy(self, storage_client, ops_headers, uploaded):
        response = storage_client.post(
            _internal_url(uploaded["s3_key"], "/parsed"),
            json={"extracted_data": _extracted(confidence_score=0.8)},
            headers=INTERNAL_HEADERS,
        )

        data = response.json()["data"]
        assert data["auto_created"] is True
        assert data["upload"]["status"] == "COMPLETED"
        policy = storage_client.get(f"/api/policies/{data['policy_id']}", headers=ops_headers).json()["data"]
        assert policy["policy_number"] == "D-777"
        assert policy["caller_name"] == "Kiran"

    def test_parsed_at_threshold_waits_for_review(self, storage_client, uploaded):
        response = storage_client.post(
            _internal_url(uploaded["s3_key"], "/parsed"),
            json={"extracted_data": _extracted(confidence_score=0.7)},
            headers=INTERNAL_HEADERS,
        )

        data = response.json()["data"]
        assert data["auto_created"] is False
        assert data["policy_id"] is None
        assert data["upload"]["status"] == "REVIEW"

    def test_parsed_with_invalid_data_stays_in_review(self, storage_client, uploaded):
        response = storage_client.post(
            _internal_url(uploaded["s3_key"], "/parsed"),
            json={"extracted_data": _extracted(confidence_score=0.9, policy_number=None)},
            headers=INTERNAL_HEADERS,
        )

        data = response.json()["data"]
        assert data["auto_created"] is False
        assert data["upload"]["status"] == "REVIEW"


class TestManualExtrasRoundTrip:
    def test_extras_survive_s3_metadata_and_lambda_callback(self, storage_client, storage, ops_headers):
        uploaded = storage_client.post(
            "/api/upload/pdf",
            files={"pdf": PDF},
            data={"insurer": "DIGIT", "manual_caller_name": "Rahul Sharma", "manual_executive": "Asha"},
            headers=ops_headers,
        ).json()["data"]

        textract = MagicMock()
        textract.start_analysis.return_value = "job-11"
        textract.get_blocks.return_value = kv_blocks({"Policy Number": "D-11"})
        callback = MagicMock()
        ExtractionPipeline(storage, textract, callback).process_object(BUCKET, uploaded["s3_key"])

        s3_key, extracted = callback.send_result.call_args.args
        assert extracted["manual_extras"] == {"caller_name": "Rahul Sharma", "executive": "Asha"}

        response = storage_client.post(
            _internal_url(s3_key),
            json={"status": "REVIEW", "extracted_data": extracted},
            headers=INTERNAL_HEADERS,
        )
        assert response.json()["data"]["manual_extras"] == {"caller_name": "Rahul Sharma", "executive": "Asha"}

        confirmed = storage_client.post(
            f"/api/upload/{uploaded['id']}/confirm",
            json={"edited_data": {"vehicle_number": "KA03XY0011", "total_premium": 7000}},
            headers=ops_headers,
        ).json()["data"]
        policy = storage_client.get(f"/api/policies/{confirmed['policy_id']}", headers=ops_headers).json()["data"]
        assert policy["caller_name"] == "Rahul Sharma"
