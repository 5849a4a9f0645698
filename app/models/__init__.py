"""Record models and their Beanie document mappings."""

from app.models.document import Document, DocumentRow, DocumentStatus
from app.models.podcast import Podcast, PodcastDocument, PodcastDocumentRow, PodcastRow, PodcastStatus
from app.models.project import Project, ProjectDocument, ProjectDocumentRow, ProjectRow

__all__ = [
    "Document",
    "DocumentRow",
    "DocumentStatus",
    "Project",
    "ProjectDocument",
    "ProjectDocumentRow",
    "ProjectRow",
    "Podcast",
    "PodcastDocument",
    "PodcastDocumentRow",
    "PodcastRow",
    "PodcastStatus",
]
