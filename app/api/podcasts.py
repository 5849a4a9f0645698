"""
Podcast generation, status polling and management.

POST /podcasts/generate creates the podcast in status=processing, links its
source documents and schedules script generation; clients then poll
GET /podcasts/{id}/status until it reports completed (or the podcast is gone,
which means generation failed).
"""

import logging
from datetime import date
from typing import Annotated, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field

from app.api.auth import CurrentUser, get_current_user
from app.api.deps import get_llm_service, get_podcast_storage, get_store
from app.config import get_settings
from app.errors import NotFound, ValidationError
from app.models.podcast import Podcast, PodcastStatus
from app.repositories import Store
from app.services.llm_service import LLMService
from app.services.storage_service import BlobStorage, path_from_public_url
from app.workers.podcast_generator import run_podcast_generation

logger = logging.getLogger(__name__)
router = APIRouter()


class PodcastGenerationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_ids: Optional[List[str]] = Field(default=None, alias="documentIds")
    project_id: Optional[str] = Field(default=None, alias="projectId")
    name: Optional[str] = None
    description: Optional[str] = None


async def _get_owned_podcast(store: Store, podcast_id: str, user_id: str) -> Podcast:
    podcast = await store.podcasts.get(podcast_id, user_id)
    if not podcast:
        raise NotFound("Podcast not found")
    return podcast


@router.post(
    "/generate",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=dict,
    summary="Start generating a podcast script",
)
async def generate_podcast(
    payload: PodcastGenerationRequest,
    background_tasks: BackgroundTasks,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
    audio_storage: Annotated[BlobStorage, Depends(get_podcast_storage)],
    llm: Annotated[LLMService, Depends(get_llm_service)],
) -> dict:
    """
    Source documents come from documentIds or from the project's documents.
    Documents the caller does not own are ignored.
    """
    if payload.document_ids is None and not payload.project_id:
        raise ValidationError("Either documentIds or projectId must be provided")

    if payload.project_id:
        project = await store.projects.get(payload.project_id, current_user.id)
        if not project:
            raise NotFound("Project not found")
        requested = await store.project_documents.child_ids(payload.project_id)
    else:
        requested = payload.document_ids or []

    target_ids = await store.documents.owned_ids(requested, current_user.id) if requested else []
    if not target_ids:
        raise ValidationError("No documents found to generate podcast from")

    podcast_name = (payload.name or "").strip() or f"Podcast {date.today().isoformat()}"
    description = (payload.description or "").strip() or None
    podcast = Podcast(
        user_id=current_user.id,
        project_id=payload.project_id,
        name=podcast_name,
        description=description,
        status=PodcastStatus.PROCESSING,
    )
    await store.podcasts.create(podcast)

    # Links only record provenance; generation goes ahead without them
    try:
        await store.podcast_documents.add(podcast.id, target_ids)
    except Exception as e:
        logger.error("Error linking documents to podcast %s: %s", podcast.id, e)

    settings = get_settings()
    background_tasks.add_task(
        run_podcast_generation,
        podcast.id,
        target_ids,
        current_user.id,
        store,
        llm,
        audio_storage,
        model=settings.llm_model,
        name=podcast_name,
        description=description,
        keep_failed=settings.keep_failed_podcasts,
    )
    logger.info("Podcast %s queued from %d documents", podcast.id, len(target_ids))

    return {
        "podcast": podcast.model_dump(mode="json"),
        "message": "Podcast generation started. Check status endpoint for updates.",
    }


@router.get("", response_model=list, summary="List podcasts")
async def list_podcasts(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
    status_filter: Optional[PodcastStatus] = Query(None, alias="status"),
    project_id: Optional[str] = None,
) -> list:
    podcasts = await store.podcasts.list_for_user(current_user.id, status=status_filter, project_id=project_id)
    return [p.model_dump(mode="json") for p in podcasts]


@router.get("/{podcast_id}", response_model=dict, summary="Get a podcast with its transcript")
async def get_podcast(
    podcast_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> dict:
    podcast = await _get_owned_podcast(store, podcast_id, current_user.id)
    return podcast.model_dump(mode="json")


@router.get("/{podcast_id}/status", response_model=dict, summary="Poll podcast generation status")
async def get_podcast_status(
    podcast_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> dict:
    podcast = await _get_owned_podcast(store, podcast_id, current_user.id)
    return {
        "id": podcast.id,
        "status": podcast.status.value,
        "hasTranscript": bool(podcast.transcript),
        "duration": podcast.duration,
        "name": podcast.name,
        "created_at": podcast.created_at.isoformat(),
        "updated_at": podcast.updated_at.isoformat(),
    }


@router.delete("/{podcast_id}", response_model=dict, summary="Delete a podcast")
async def delete_podcast(
    podcast_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
    audio_storage: Annotated[BlobStorage, Depends(get_podcast_storage)],
) -> dict:
    podcast = await _get_owned_podcast(store, podcast_id, current_user.id)

    if podcast.audio_url:
        audio_path = path_from_public_url(podcast.audio_url)
        try:
            if audio_path:
                await audio_storage.remove([audio_path])
        except Exception as e:
            logger.error("Failed to remove audio for podcast %s: %s", podcast_id, e)

    await store.podcast_documents.delete_for_parent(podcast_id)
    await store.podcasts.delete(podcast_id, current_user.id)
    logger.info("Deleted podcast %s for user %s", podcast_id, current_user.id)
    return {"success": True}
