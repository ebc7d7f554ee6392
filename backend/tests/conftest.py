"""Pytest environment isolation for backend tests.

These tests must never touch a real database, bucket or provider account.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

import pytest
from sqlalchemy import delete

# Configure an isolated filesystem root before app settings are imported.
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="pictoria-pytest-")).resolve()
_TEST_DB = _TEST_ROOT / "test.db"
_TEST_STORAGE = _TEST_ROOT / "storage"

from tests.fakes import WEBHOOK_SECRET, FakeEmail, FakeIdentity, FakeReplicate, RecordingStorage  # noqa: E402

os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB}"
os.environ["STORAGE_DIR"] = str(_TEST_STORAGE)
os.environ["USE_S3_STORAGE"] = "false"
os.environ["REPLICATE_API_TOKEN"] = "r8_test_token"
os.environ["REPLICATE_WEBHOOK_SECRET"] = WEBHOOK_SECRET
os.environ["SITE_URL"] = "https://pictoria.test"
os.environ["RESEND_API_KEY"] = "re_test"

from pictoria.config import get_settings

get_settings.cache_clear()



@pytest.fixture(scope="session", autouse=True)
def _bootstrap_test_environment() -> None:
    """Prepare isolated directories and database schema once per test session."""
    _TEST_STORAGE.mkdir(parents=True, exist_ok=True)

    import pictoria.models  # noqa: F401
    from pictoria.database import Base, engine

    Base.metadata.create_all(bind=engine)
    yield

    Base.metadata.drop_all(bind=engine)
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)


@pytest.fixture(autouse=True)
def _isolate_each_test() -> None:
    """Clear persisted rows and rate-limit windows for every test."""
    from pictoria.api.deps import rate_limiter
    from pictoria.database import Base, SessionLocal

    with SessionLocal() as db:
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(delete(table))
        db.commit()

    rate_limiter.reset()
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def replicate() -> FakeReplicate:
    return FakeReplicate()


@pytest.fixture
def identity() -> FakeIdentity:
    return FakeIdentity()


@pytest.fixture
def email() -> FakeEmail:
    return FakeEmail()


@pytest.fixture
def storage(tmp_path: Path) -> RecordingStorage:
    return RecordingStorage(base_dir=tmp_path / "buckets")


@pytest.fixture
def client(replicate, identity, email, storage):
    """TestClient with every external provider replaced by an in-memory fake."""
    from fastapi.testclient import TestClient

    from pictoria.api import deps
    from pictoria.main import app

    app.dependency_overrides[deps.get_replicate_client] = lambda: replicate
    app.dependency_overrides[deps.get_identity_client] = lambda: identity
    app.dependency_overrides[deps.get_email_client] = lambda: email
    app.dependency_overrides[deps.get_storage_backend] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
