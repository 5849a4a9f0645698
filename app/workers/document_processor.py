"""
Background document processing worker.

Drives one document through parsing: download the stored bytes, extract the
text and record it on the document. Runs as a FastAPI BackgroundTask after
upload so the request returns immediately; the reprocess endpoint awaits it
directly instead.

Status goes uploaded/any -> processing -> processed, or -> error when the
download or parse fails. Each run re-downloads and re-parses, so calling it
again on the same document simply overwrites the previous result. There is no
locking: concurrent runs race on the final write and the last one wins.
"""

import asyncio
import logging

from pydantic import BaseModel

from app.errors import NotFound
from app.models.document import DocumentStatus
from app.repositories import Store
from app.services.parser_service import parse_file
from app.services.storage_service import BlobStorage

logger = logging.getLogger(__name__)


class ProcessingResult(BaseModel):
    success: bool
    content: str


async def process_document(
    document_id: str,
    user_id: str,
    store: Store,
    storage: BlobStorage,
) -> ProcessingResult:
    """
    Parse one document and store its text.
    Raises NotFound, DownloadFailure, ParseFailure or UnsupportedMediaType; the
    document is marked error before any failure after the lookup propagates.
    """
    doc = await store.documents.get(document_id, user_id)
    if not doc:
        raise NotFound("Document not found")

    # Mark as processing so the client sees progress; content is cleared because
    # it is only valid while the document is processed
    try:
        await store.documents.update(document_id, status=DocumentStatus.PROCESSING, content=None)
    except Exception as e:
        logger.warning("Could not mark document %s as processing: %s", document_id, e)
    logger.info("Started processing document %s", document_id)

    try:
        raw = await storage.download(doc.storage_path)
        # Parsing is CPU-bound and blocking; run in thread pool to avoid blocking event loop
        parsed = await asyncio.to_thread(parse_file, raw, doc.mime_type, doc.original_name)
        await store.documents.update(
            document_id,
            content=parsed.text,
            status=DocumentStatus.PROCESSED,
        )
    except Exception as e:
        logger.exception("Processing failed for document %s: %s", document_id, e)
        try:
            await store.documents.update(document_id, status=DocumentStatus.ERROR, content=None)
        except Exception as status_error:
            logger.error("Could not mark document %s as error: %s", document_id, status_error)
        raise

    logger.info("Document %s processed; %d characters extracted.", document_id, len(parsed.text))
    return ProcessingResult(success=True, content=parsed.text)


async def run_document_processing(
    document_id: str,
    user_id: str,
    store: Store,
    storage: BlobStorage,
) -> None:
    """BackgroundTask entry point: failures are already recorded on the document."""
    try:
        await process_document(document_id, user_id, store, storage)
    except Exception as e:
        logger.error("Background document processing failed for %s: %s", document_id, e)
