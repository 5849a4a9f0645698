"""
Document upload, listing and reprocessing APIs.

POST /documents/upload: store the file, create a record, trigger background parsing.
GET /documents: list the caller's documents (filter by status or project).
GET /documents/{id}: one document including its parsed content.
DELETE /documents/{id}: remove the stored file, its links and the record.
POST /documents/{id}/reprocess: re-run the parser and wait for the result.
"""

import logging
import secrets
import time
from pathlib import PurePath
from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, UploadFile, status
from fastapi.responses import JSONResponse

from app.api.auth import CurrentUser, get_current_user
from app.api.deps import get_document_storage, get_store
from app.config import get_settings
from app.errors import NotFound, StorageInconsistency, UploadFailure, ValidationError
from app.models.document import Document, DocumentStatus
from app.repositories import Store
from app.services.parser_service import is_supported_file_type, validate_file_size
from app.services.storage_service import BlobStorage
from app.workers.document_processor import process_document, run_document_processing

logger = logging.getLogger(__name__)
router = APIRouter()


def _storage_name(user_id: str, original_name: str) -> str:
    """<user>/<ms timestamp>-<random>.<ext>, unique per upload."""
    suffix = PurePath(original_name).suffix.lstrip(".") or "bin"
    return f"{user_id}/{int(time.time() * 1000)}-{secrets.token_hex(6)}.{suffix}"


@router.post(
    "/upload",
    status_code=status.HTTP_201_CREATED,
    response_model=dict,
    summary="Upload a document",
)
async def upload_document(
    background_tasks: BackgroundTasks,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
    storage: Annotated[BlobStorage, Depends(get_document_storage)],
    file: Optional[UploadFile] = File(None),
) -> dict:
    """
    Accept a PDF, Word, text or markdown file, store it, create a document with
    status=uploaded and schedule parsing. Returns immediately with the record.
    """
    if file is None or not file.filename:
        raise ValidationError("No file provided")
    if not is_supported_file_type(file.content_type):
        raise ValidationError(f"Unsupported file type: {file.content_type}")

    content = await file.read()
    max_mb = get_settings().max_upload_size_mb
    if not validate_file_size(len(content), max_mb * 1024 * 1024):
        raise ValidationError(f"File size exceeds maximum of {max_mb}MB")

    filename = _storage_name(current_user.id, file.filename)
    storage_path = await storage.upload(filename, content, content_type=file.content_type)
    logger.info("Saved upload %s for user %s", storage_path, current_user.id)

    doc = Document(
        user_id=current_user.id,
        filename=filename,
        original_name=file.filename,
        mime_type=file.content_type,
        size=len(content),
        storage_path=storage_path,
        status=DocumentStatus.UPLOADED,
    )
    try:
        await store.documents.create(doc)
    except Exception as e:
        logger.exception("Failed to create document record for %s", storage_path)
        # Do not leave an orphaned file behind
        try:
            await storage.remove([storage_path])
        except Exception as cleanup_error:
            raise StorageInconsistency(
                f"Failed to create document record ({e}); stored file {storage_path} could not be removed"
            ) from cleanup_error
        raise UploadFailure(f"Failed to create document record: {e}") from e

    # BackgroundTasks run after the response is sent, keeping request scope clean
    background_tasks.add_task(run_document_processing, doc.id, current_user.id, store, storage)

    return {
        "document": doc.model_dump(mode="json"),
        "storageUrl": storage.get_public_url(filename),
    }


@router.get(
    "",
    response_model=list,
    summary="List documents",
)
async def list_documents(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
    status_filter: Optional[DocumentStatus] = Query(None, alias="status"),
    project_id: Optional[str] = None,
) -> list:
    """Return the caller's documents (newest first), each with the projects it belongs to."""
    document_ids = None
    if project_id:
        document_ids = await store.project_documents.child_ids(project_id)
        if not document_ids:
            return []

    docs = await store.documents.list_for_user(current_user.id, status=status_filter, document_ids=document_ids)
    projects_by_doc = await store.project_documents.parent_ids_by_child([d.id for d in docs])
    return [
        {**d.model_dump(mode="json"), "project_ids": projects_by_doc.get(d.id, [])}
        for d in docs
    ]


@router.get(
    "/{document_id}",
    response_model=dict,
    summary="Get a document",
)
async def get_document(
    document_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
) -> dict:
    doc = await store.documents.get(document_id, current_user.id)
    if not doc:
        raise NotFound("Document not found")
    return doc.model_dump(mode="json")


@router.delete(
    "/{document_id}",
    response_model=dict,
    summary="Delete a document",
)
async def delete_document(
    document_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
    storage: Annotated[BlobStorage, Depends(get_document_storage)],
) -> dict:
    """Delete the record and its links; the stored file is removed best-effort."""
    doc = await store.documents.get(document_id, current_user.id)
    if not doc:
        raise NotFound("Document not found")

    try:
        await storage.remove([doc.storage_path])
    except Exception as e:
        logger.error("Failed to remove stored file %s: %s", doc.storage_path, e)

    await store.project_documents.delete_for_child(document_id)
    await store.podcast_documents.delete_for_child(document_id)
    await store.documents.delete(document_id, current_user.id)
    logger.info("Deleted document %s for user %s", document_id, current_user.id)
    return {"success": True}


@router.post(
    "/{document_id}/reprocess",
    response_model=dict,
    summary="Re-run the parser on a document",
)
async def reprocess_document(
    document_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Store, Depends(get_store)],
    storage: Annotated[BlobStorage, Depends(get_document_storage)],
):
    """
    Used when a document shows no content or an error status. Waits for the
    parser so the response carries the new content.
    """
    if not await store.documents.get(document_id, current_user.id):
        raise NotFound("Document not found")

    try:
        result = await process_document(document_id, current_user.id, store, storage)
    except NotFound:
        raise
    except Exception as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(e) or "Failed to reprocess document"},
        )

    return {
        "success": True,
        "content": result.content,
        "message": "Document reprocessed successfully.",
    }
