"""
Project CRUD and project/document membership.

Membership updates replace the whole set: existing links are deleted, then the
submitted documents are linked. The two steps are not atomic.
"""

import logging
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field

from app.api.auth import CurrentUser, get_current_user
from app.api.deps import get_store
from app.errors import Forbidden, NotFound, ValidationError
from app.models.project import Project
from app.repositories import Store

logger = logging.getLogger(__name__)
router = APIRouter()


class ProjectPayload(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class ProjectDocumentsPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Left untyped so a non-list body is reported with our own message
    document_ids: Any = Field(default=None, alias="documentIds")


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Project name is required")
    return cleaned


def _clean_description(description: Optional[str]) -> Optional[str]:
    return (description or "").strip() or None


async def _get_owned_project(store: Store, project_id: str, user_id: str) -> Project:
    project = await store.projects.get(project_id, user_id)
    if not project:
        raise NotFound("Project not found")
    return project


@router.post("", status_code=status.HTTP_201_CREATED, response_model=dict, summary="Create a project")
async def create_project(
    payload: ProjectPayload,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> dict:
    project = Project(
        user_id=current_user.id,
        name=_clean_name(payload.name),
        description=_clean_description(payload.description),
    )
    await store.projects.create(project)
    logger.info("Created project %s for user %s", project.id, current_user.id)
    return project.model_dump(mode="json")


@router.get("", response_model=list, summary="List projects")
async def list_projects(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> list:
    projects = await store.projects.list_for_user(current_user.id)
    return [p.model_dump(mode="json") for p in projects]


@router.get("/{project_id}", response_model=dict, summary="Get a project with its documents")
async def get_project(
    project_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> dict:
    project = await _get_owned_project(store, project_id, current_user.id)

    document_ids = await store.project_documents.child_ids(project_id)
    documents = []
    if document_ids:
        documents = await store.documents.list_for_user(current_user.id, document_ids=document_ids)

    return {
        **project.model_dump(mode="json"),
        "documents": [d.model_dump(mode="json") for d in documents],
    }


@router.put("/{project_id}", response_model=dict, summary="Update a project")
async def update_project(
    project_id: str,
    payload: ProjectPayload,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> dict:
    await _get_owned_project(store, project_id, current_user.id)

    values = {}
    fields = payload.model_fields_set
    if "name" in fields:
        values["name"] = _clean_name(payload.name)
    if "description" in fields:
        values["description"] = _clean_description(payload.description)

    project = await store.projects.update(project_id, current_user.id, **values)
    if not project:
        raise NotFound("Project not found")
    return project.model_dump(mode="json")


@router.delete("/{project_id}", response_model=dict, summary="Delete a project")
async def delete_project(
    project_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> dict:
    """Documents survive; only their membership links are removed."""
    await _get_owned_project(store, project_id, current_user.id)

    await store.project_documents.delete_for_parent(project_id)
    await store.podcasts.detach_project(project_id, current_user.id)
    await store.projects.delete(project_id, current_user.id)
    logger.info("Deleted project %s for user %s", project_id, current_user.id)
    return {"success": True}


@router.post("/{project_id}/documents", response_model=dict, summary="Replace a project's documents")
async def set_project_documents(
    project_id: str,
    payload: ProjectDocumentsPayload,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> dict:
    await _get_owned_project(store, project_id, current_user.id)

    document_ids = payload.document_ids
    if not isinstance(document_ids, list) or not document_ids:
        raise ValidationError("documentIds array is required")
    if not all(isinstance(d, str) for d in document_ids):
        raise ValidationError("documentIds must be strings")

    requested = list(dict.fromkeys(document_ids))
    owned = await store.documents.owned_ids(requested, current_user.id)
    if len(owned) != len(requested):
        raise Forbidden("One or more documents not found or access denied")

    await store.project_documents.replace(project_id, requested)
    logger.info("Project %s now has %d documents", project_id, len(requested))
    return {"success": True}
