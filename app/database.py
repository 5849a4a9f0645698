"""
Database connection and Beanie ODM initialization.

Beanie is an async ODM for MongoDB built on Motor and Pydantic.
We initialize it once at startup and close at shutdown.
"""

import logging
from typing import List, Optional, Type

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from app.config import get_settings
from app.models import (
    DocumentRow,
    PodcastDocumentRow,
    PodcastRow,
    ProjectDocumentRow,
    ProjectRow,
)

logger = logging.getLogger(__name__)

_client: Optional[AsyncIOMotorClient] = None


def create_client(url: str) -> AsyncIOMotorClient:
    """Motor client that returns timezone-aware (UTC) datetimes."""
    return AsyncIOMotorClient(url, tz_aware=True)


async def connect_to_mongo() -> None:
    """
    Create Motor client and initialize Beanie with the row models.
    Called once at application startup.
    """
    global _client
    settings = get_settings()
    _client = create_client(settings.mongodb_url)
    database = _client[settings.mongodb_database]

    # Row models that Beanie will manage (collections + indexes)
    document_models: List[Type] = [
        DocumentRow,
        ProjectRow,
        ProjectDocumentRow,
        PodcastRow,
        PodcastDocumentRow,
    ]

    await init_beanie(
        database=database,
        document_models=document_models,
    )
    logger.info("MongoDB connection established; Beanie initialized.")


async def close_mongo_connection() -> None:
    """Close the Motor client on application shutdown."""
    global _client
    logger.info("Closing MongoDB connection.")
    if _client is not None:
        _client.close()
        _client = None
