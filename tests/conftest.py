"""
Shared test fixtures.

Provides: in-memory store, temporary blob buckets, fake completion service and
an authenticated TestClient wired to all of them.
"""

import os
import tempfile

import pytest
from fastapi.testclient import TestClient

# Keep the app's static mount out of the working tree
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="podcast-storage-"))

from app.api.auth import CurrentUser, get_current_user  # noqa: E402
from app.api.deps import get_document_storage, get_llm_service, get_podcast_storage, get_store  # noqa: E402
from app.main import app  # noqa: E402
from app.services.storage_service import BlobStorage  # noqa: E402
from tests.factories import PUBLIC_URL, USER_ID  # noqa: E402
from tests.fakes import FakeLLM, memory_store  # noqa: E402


@pytest.fixture
def store():
    return memory_store()


@pytest.fixture
def documents_bucket(tmp_path):
    return BlobStorage(tmp_path, "documents", PUBLIC_URL)


@pytest.fixture
def podcasts_bucket(tmp_path):
    return BlobStorage(tmp_path, "podcasts", PUBLIC_URL)


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def client(store, documents_bucket, podcasts_bucket, llm):
    """
    TestClient with every collaborator replaced by an in-memory fake and the
    caller authenticated as USER_ID. The lifespan (MongoDB) is not started.
    """
    app.dependency_overrides[get_current_user] = lambda: CurrentUser(id=USER_ID, email="host@example.com")
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_document_storage] = lambda: documents_bucket
    app.dependency_overrides[get_podcast_storage] = lambda: podcasts_bucket
    app.dependency_overrides[get_llm_service] = lambda: llm
    yield TestClient(app)
    app.dependency_overrides.clear()
