"""
Persistence layer.

Store bundles one repository per collection so handlers and jobs receive a
single explicit handle instead of reaching for global state.
"""

from dataclasses import dataclass

from app.models.podcast import Podcast, PodcastDocument, PodcastDocumentRow, PodcastRow
from app.models.document import Document, DocumentRow
from app.models.project import Project, ProjectDocument, ProjectDocumentRow, ProjectRow
from app.repositories.base import MongoTable, Table
from app.repositories.documents import DocumentRepository
from app.repositories.links import LinkRepository
from app.repositories.podcasts import PodcastRepository
from app.repositories.projects import ProjectRepository


def project_link(project_id: str, document_id: str, position: int) -> ProjectDocument:
    return ProjectDocument(project_id=project_id, document_id=document_id, position=position)


def podcast_link(podcast_id: str, document_id: str, position: int) -> PodcastDocument:
    return PodcastDocument(podcast_id=podcast_id, document_id=document_id, position=position)


@dataclass
class Store:
    documents: DocumentRepository
    projects: ProjectRepository
    podcasts: PodcastRepository
    project_documents: LinkRepository
    podcast_documents: LinkRepository

    @classmethod
    def from_tables(
        cls,
        documents: Table,
        projects: Table,
        podcasts: Table,
        project_documents: Table,
        podcast_documents: Table,
    ) -> "Store":
        return cls(
            documents=DocumentRepository(documents),
            projects=ProjectRepository(projects),
            podcasts=PodcastRepository(podcasts),
            project_documents=LinkRepository(project_documents, "project_id", project_link),
            podcast_documents=LinkRepository(podcast_documents, "podcast_id", podcast_link),
        )


def mongo_store() -> Store:
    """Store over the Beanie collections; init_beanie must have run."""
    return Store.from_tables(
        documents=MongoTable(DocumentRow, Document),
        projects=MongoTable(ProjectRow, Project),
        podcasts=MongoTable(PodcastRow, Podcast),
        project_documents=MongoTable(ProjectDocumentRow, ProjectDocument),
        podcast_documents=MongoTable(PodcastDocumentRow, PodcastDocument),
    )


__all__ = [
    "DocumentRepository",
    "LinkRepository",
    "MongoTable",
    "PodcastRepository",
    "ProjectRepository",
    "Store",
    "Table",
    "mongo_store",
]
