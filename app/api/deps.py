"""
Shared FastAPI dependencies.

Handlers receive the store, blob buckets and completion client through these
functions; tests replace them with app.dependency_overrides.
"""

from functools import lru_cache

from app.config import get_settings
from app.repositories import Store, mongo_store
from app.services.llm_service import LLMService, llm_service
from app.services.storage_service import BlobStorage


@lru_cache
def get_store() -> Store:
    return mongo_store()


def get_document_storage() -> BlobStorage:
    settings = get_settings()
    return BlobStorage(settings.storage_dir, settings.documents_bucket, settings.public_base_url)


def get_podcast_storage() -> BlobStorage:
    settings = get_settings()
    return BlobStorage(settings.storage_dir, settings.podcasts_bucket, settings.public_base_url)


def get_llm_service() -> LLMService:
    return llm_service
