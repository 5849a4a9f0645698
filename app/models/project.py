"""
Project model: a named grouping of documents.

Projects and documents are many-to-many through ProjectDocument, which stores
the pair of ids and the document's position within the project.
"""

from datetime import datetime
from typing import Optional

from beanie import Document as BeanieDocument
from pydantic import BaseModel, Field

from app.models.base import new_id, utcnow


class Project(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    name: str
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ProjectDocument(BaseModel):
    """Join row between a project and one of its documents."""

    id: str = Field(default_factory=new_id)
    project_id: str
    document_id: str
    position: int = 0  # Order within the project


class ProjectRow(BeanieDocument, Project):
    id: str = Field(default_factory=new_id)

    class Settings:
        name = "projects"


class ProjectDocumentRow(BeanieDocument, ProjectDocument):
    id: str = Field(default_factory=new_id)

    class Settings:
        name = "project_documents"
