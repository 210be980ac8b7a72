"""
Text extraction for uploaded profile documents.
PDF via pdfplumber, DOCX via python-docx, TXT decoded as UTF-8.
"""

import io
import logging
import re
from pathlib import PurePath
from typing import List, Optional

import docx
import pdfplumber

from macrodesk.domain.exceptions import DocumentError
from macrodesk.domain.models import FileType, ProfileFile

logger = logging.getLogger(__name__)

_EXTENSION_TYPES = {
    ".pdf": FileType.PDF,
    ".docx": FileType.DOCX,
    ".doc": FileType.DOCX,
    ".txt": FileType.TXT,
}


def detect_file_type(filename: str) -> FileType:
    return _EXTENSION_TYPES.get(PurePath(filename or "").suffix.lower(), FileType.OTHER)


def title_from_filename(filename: str) -> str:
    """File name without its last extension ("notes.v2.pdf" -> "notes.v2")."""
    return re.sub(r"\.[^/.]+$", "", filename or "")


def _pdf_text(data: bytes) -> str:
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        return "\n".join(page.extract_text() or "" for page in pdf.pages)


def _docx_text(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    return "\n".join(p.text for p in document.paragraphs)


def extract_text(file_type: FileType, data: bytes) -> str:
    """
    Plain text of a document. Unsupported types yield "".

    Raises:
        DocumentError: the document could not be parsed
    """
    if file_type == FileType.TXT:
        return data.decode("utf-8", errors="replace")
    if file_type == FileType.OTHER:
        return ""
    try:
        if file_type == FileType.PDF:
            return _pdf_text(data)
        return _docx_text(data)
    except Exception as exc:
        raise DocumentError(f"Could not read {file_type.value} document: {exc}") from exc


def build_profile_file(
    filename: str,
    data: bytes,
    uploaded_at: str,
    tags: Optional[List[str]] = None,
) -> ProfileFile:
    """Profile entry for one upload: typed by extension, titled by file name."""
    file_type = detect_file_type(filename)
    content = extract_text(file_type, data)
    logger.debug("Extracted %d chars from %s (%s)", len(content), filename, file_type.value)
    return ProfileFile(
        title=title_from_filename(filename),
        date=uploaded_at,
        type=file_type,
        tags=list(tags or []),
        content=content,
    )
