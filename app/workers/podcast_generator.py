"""
Background podcast script generation.

Collects the processed text of the requested documents, asks the completion
service for a two-host script and stores the transcript on the podcast.

A podcast that fails to generate has no transcript and no recoverable audio,
so by default it is removed along with its links and any stored audio. When
keep_failed is set the row is kept and marked error with the reason instead.
"""

import logging
from typing import Optional, Sequence

from app.errors import AppError, GenerationFailure, NoContentAvailable, StorageInconsistency
from app.models.podcast import PodcastStatus
from app.repositories import Store
from app.services import script_service
from app.services.script_service import CompletionClient, PodcastScript
from app.services.storage_service import BlobStorage, path_from_public_url

logger = logging.getLogger(__name__)


async def cleanup_failed_podcast(
    podcast_id: str,
    store: Store,
    audio_storage: BlobStorage,
    user_id: Optional[str] = None,
) -> None:
    """
    Remove the podcast's audio blob, its document links and the row itself.
    Each step is attempted even if an earlier one failed; nothing is raised.
    """
    try:
        podcast = await store.podcasts.get(podcast_id, user_id)
        if podcast and podcast.audio_url:
            audio_path = path_from_public_url(podcast.audio_url)
            if audio_path:
                await audio_storage.remove([audio_path])
    except Exception as e:
        logger.error("Error removing audio for cleanup of podcast %s: %s", podcast_id, e)

    try:
        await store.podcast_documents.delete_for_parent(podcast_id)
    except Exception as e:
        logger.error("Error deleting podcast_documents for %s: %s", podcast_id, e)

    try:
        await store.podcasts.delete(podcast_id, user_id)
    except Exception as e:
        logger.error("Error deleting podcast %s: %s", podcast_id, e)


async def _mark_failed(podcast_id: str, store: Store, reason: str) -> None:
    try:
        await store.podcasts.update(podcast_id, status=PodcastStatus.ERROR, error_message=reason[:500])
    except Exception as e:
        logger.error("Could not mark podcast %s as error: %s", podcast_id, e)


async def generate_podcast(
    podcast_id: str,
    document_ids: Sequence[str],
    user_id: str,
    store: Store,
    llm: CompletionClient,
    audio_storage: BlobStorage,
    model: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
    keep_failed: bool = False,
) -> PodcastScript:
    """
    Generate and store the script for podcast_id.

    On failure the podcast is cleaned up (or marked error when keep_failed) and
    the error is re-raised with cleaned_up=True. Errors that are not AppError
    are wrapped in GenerationFailure.
    """
    try:
        documents = await store.documents.list_processed(document_ids, user_id)
        if not documents:
            raise NoContentAvailable("No processed documents found")

        script = await script_service.generate_podcast_script(
            [doc.content or "" for doc in documents],
            llm,
            model=model,
            name=name,
            description=description,
        )

        updated = await store.podcasts.update(
            podcast_id,
            transcript=script.transcript,
            duration=script.estimated_duration,
            status=PodcastStatus.COMPLETED,
        )
        if not updated:
            raise StorageInconsistency(f"Failed to update podcast {podcast_id}: record no longer exists")
    except Exception as e:
        logger.exception("Error processing podcast %s: %s", podcast_id, e)
        if keep_failed:
            await _mark_failed(podcast_id, store, str(e))
        else:
            await cleanup_failed_podcast(podcast_id, store, audio_storage, user_id)

        if isinstance(e, AppError):
            e.cleaned_up = True
            raise
        failure = GenerationFailure(f"Failed to generate podcast script: {e}")
        failure.cleaned_up = True
        raise failure from e

    logger.info(
        "Podcast %s generated from %d documents (~%ds)",
        podcast_id,
        len(documents),
        script.estimated_duration,
    )
    return script


async def run_podcast_generation(
    podcast_id: str,
    document_ids: Sequence[str],
    user_id: str,
    store: Store,
    llm: CompletionClient,
    audio_storage: BlobStorage,
    model: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
    keep_failed: bool = False,
) -> None:
    """BackgroundTask entry point; nobody is waiting on the result."""
    try:
        await generate_podcast(
            podcast_id,
            document_ids,
            user_id,
            store,
            llm,
            audio_storage,
            model=model,
            name=name,
            description=description,
            keep_failed=keep_failed,
        )
    except Exception as e:
        logger.error("Background podcast generation failed for %s: %s", podcast_id, e)
        if not getattr(e, "cleaned_up", False) and not keep_failed:
            await cleanup_failed_podcast(podcast_id, store, audio_storage, user_id)
