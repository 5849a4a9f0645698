"""
Content parser: raw file bytes + media type -> plain text.

PDF goes through PyPDF2, Word files through python-docx, text and markdown
are decoded as UTF-8. Parsing is CPU-bound and blocking; the worker calls
parse_file via asyncio.to_thread so the event loop stays free.
"""

import io
import logging
from typing import Callable, Dict, List, Optional

import docx
from PyPDF2 import PdfReader
from pydantic import BaseModel

from app.errors import ContentParserError, ParseFailure, UnsupportedMediaType

logger = logging.getLogger(__name__)

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
MSWORD = "application/msword"
PLAIN_TEXT = "text/plain"
MARKDOWN = "text/markdown"

ALLOWED_MIME_TYPES = (PDF, DOCX, MSWORD, PLAIN_TEXT, MARKDOWN)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB


class DocumentMetadata(BaseModel):
    title: Optional[str] = None
    author: Optional[str] = None
    page_count: Optional[int] = None


class ParsedDocument(BaseModel):
    text: str
    metadata: Optional[DocumentMetadata] = None


def _parse_pdf(content: bytes) -> ParsedDocument:
    reader = PdfReader(io.BytesIO(content))
    parts: List[str] = []
    for page in reader.pages:
        text = page.extract_text()
        if text:
            parts.append(text)
    info = reader.metadata
    return ParsedDocument(
        text="\n".join(parts),
        metadata=DocumentMetadata(
            title=(info.title or None) if info else None,
            author=(info.author or None) if info else None,
            page_count=len(reader.pages),
        ),
    )


def _parse_docx(content: bytes) -> ParsedDocument:
    # Raw text only; python-docx exposes core properties but they are rarely filled in
    document = docx.Document(io.BytesIO(content))
    text = "\n".join(paragraph.text for paragraph in document.paragraphs)
    return ParsedDocument(text=text, metadata=DocumentMetadata())


def _parse_text(content: bytes) -> ParsedDocument:
    return ParsedDocument(text=content.decode("utf-8", errors="replace"))


_PARSERS: Dict[str, Callable[[bytes], ParsedDocument]] = {
    PDF: _parse_pdf,
    DOCX: _parse_docx,
    MSWORD: _parse_docx,
    PLAIN_TEXT: _parse_text,
    MARKDOWN: _parse_text,
}


def parse_file(content: bytes, mime_type: str, filename: str) -> ParsedDocument:
    """
    Extract text (and, for PDFs, title/author/page count) from a file buffer.

    Raises UnsupportedMediaType for types we cannot read and ParseFailure when
    the underlying library fails. Never returns partial text.
    """
    parser = _PARSERS.get(mime_type)
    if parser is None:
        raise UnsupportedMediaType(f"Unsupported file type: {mime_type}")
    try:
        return parser(content)
    except ContentParserError:
        raise
    except Exception as e:
        logger.warning("Parser error for %s (%s): %s", filename, mime_type, e)
        raise ParseFailure(f"Failed to parse file {filename}: {e}") from e


def is_supported_file_type(mime_type: Optional[str]) -> bool:
    return mime_type in ALLOWED_MIME_TYPES


def validate_file_size(size: int, max_size: int = MAX_FILE_SIZE) -> bool:
    return size <= max_size
