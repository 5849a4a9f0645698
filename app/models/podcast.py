"""
Podcast model: a generated script plus its metadata.

PodcastDocument records which source documents fed the script. Writing those
links is best-effort, so a podcast may exist without them.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document as BeanieDocument
from pydantic import BaseModel, Field

from app.models.base import new_id, utcnow


class PodcastStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"  # transcript and duration are set
    ERROR = "error"  # Only used when failed podcasts are kept


class Podcast(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    project_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    audio_url: Optional[str] = None
    duration: Optional[int] = None  # Estimated spoken length in seconds
    transcript: Optional[str] = None
    status: PodcastStatus = PodcastStatus.PENDING
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class PodcastDocument(BaseModel):
    id: str = Field(default_factory=new_id)
    podcast_id: str
    document_id: str
    position: int = 0


class PodcastRow(BeanieDocument, Podcast):
    id: str = Field(default_factory=new_id)

    class Settings:
        name = "podcasts"


class PodcastDocumentRow(BeanieDocument, PodcastDocument):
    id: str = Field(default_factory=new_id)

    class Settings:
        name = "podcast_documents"
