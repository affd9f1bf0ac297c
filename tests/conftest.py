"""
Pytest configuration and shared fixtures.

Provides an isolated SQLite database, moto-backed S3, users with tokens,
and a FastAPI TestClient with storage wired in per test.
"""

import asyncio
import os
import tempfile

# Set test environment before importing application modules
_DB_DIR = tempfile.mkdtemp(prefix="policy_crm_tests_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["APP_ENV"] = "test"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["INTERNAL_API_TOKEN"] = "test-internal-token"
os.environ["AWS_S3_BUCKET"] = "test-policy-bucket"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ.pop("OPENAI_API_KEY", None)

import boto3  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from moto import mock_aws  # noqa: E402

import policy_crm.domain  # noqa: E402,F401
from policy_crm.core.security import create_access_token, hash_password  # noqa: E402
from policy_crm.db.base import Base, async_session_factory, engine  # noqa: E402
from policy_crm.domain.user import ROLE_FOUNDER, ROLE_OPS, User  # noqa: E402
from policy_crm.services.storage import StorageService, get_storage  # noqa: E402

BUCKET = "test-policy-bucket"
INTERNAL_HEADERS = {"x-internal-token": "test-internal-token"}


async def _reset_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _create_user(email: str, role: str, name: str) -> User:
    async with async_session_factory() as session:
        user = User(email=email, password_hash=hash_password("secret123"), name=name, role=role)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


# --- Database ---


@pytest.fixture(autouse=True)
def reset_db():
    """Fresh tables for every test."""
    asyncio.run(_reset_schema())
    yield


# --- AWS ---


@pytest.fixture
def s3_client():
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=BUCKET)
        yield client


@pytest.fixture
def storage(s3_client) -> StorageService:
    return StorageService(client=s3_client, bucket=BUCKET)


# --- App ---


@pytest.fixture
def app():
    from policy_crm.main import app as fastapi_app

    fastapi_app.dependency_overrides[get_storage] = lambda: None
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def storage_client(app, client, storage):
    """TestClient whose routes write to the moto bucket."""
    app.dependency_overrides[get_storage] = lambda: storage
    return client


# --- Users ---


@pytest.fixture
def ops_user() -> User:
    return asyncio.run(_create_user("ops@example.com", ROLE_OPS, "Ops User"))


@pytest.fixture
def founder_user() -> User:
    return asyncio.run(_create_user("founder@example.com", ROLE_FOUNDER, "Founder"))


@pytest.fixture
def ops_headers(ops_user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(ops_user)}"}


@pytest.fixture
def founder_headers(founder_user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(founder_user)}"}


# --- Sample data ---


@pytest.fixture
def policy_payload() -> dict:
    return {
        "policy_number": "TA-9001",
        "vehicle_number": "KA01AB1234",
        "insurer": "TATA_AIG",
        "make": "Maruti",
        "model": "Swift",
        "issue_date": "2025-01-01",
        "expiry_date": "2025-12-31",
        "idv": 450000,
        "ncb": 20,
        "total_premium": 12000,
        "cashback_amount": 600,
        "executive": "Ravi",
        "rollover": "RENEWAL",
    }
