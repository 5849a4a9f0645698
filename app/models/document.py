"""
Document model for uploaded files.

Tracks where the file is stored, its status through the parsing pipeline,
the parsed text and ownership. Document is the plain record passed around the
app; DocumentRow is its Beanie mapping onto the "documents" collection.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document as BeanieDocument
from pydantic import BaseModel, Field

from app.models.base import new_id, utcnow


class DocumentStatus(str, Enum):
    """Lifecycle states of a document in the pipeline."""

    UPLOADED = "uploaded"  # Stored, parser not started yet
    PROCESSING = "processing"  # Parser is running
    PROCESSED = "processed"  # content holds the parsed text
    ERROR = "error"  # Download or parse failed


class Document(BaseModel):
    """
    An uploaded file plus its parsed text.
    content is only set while status is PROCESSED.
    """

    id: str = Field(default_factory=new_id)
    user_id: str
    filename: str  # Name inside the storage bucket
    original_name: str
    mime_type: str
    size: int
    storage_path: str
    status: DocumentStatus = DocumentStatus.UPLOADED
    content: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = {
        "json_schema_extra": {
            "example": {
                "filename": "user-1/1700000000000-k2j3h4.pdf",
                "original_name": "chapter-1.pdf",
                "mime_type": "application/pdf",
                "size": 20480,
                "status": "uploaded",
            }
        }
    }


class DocumentRow(BeanieDocument, Document):
    id: str = Field(default_factory=new_id)

    class Settings:
        name = "documents"
