# app/services/file_processor.py
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import docx

from ..config import get_settings
from ..utils.text import word_count

logger = logging.getLogger(__name__)
settings = get_settings()

DOCX_CT = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# extension -> (kind, canonical content type)
SUPPORTED = {
    ".txt": ("text", "text/plain"),
    ".md": ("text", "text/markdown"),
    ".docx": ("docx", DOCX_CT),
}
CT_TO_EXT = {
    "text/plain": ".txt",
    "text/markdown": ".md",
    DOCX_CT: ".docx",
}


class FileProcessingError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class UnsupportedFileType(FileProcessingError):
    status_code = 415


class FileTooLarge(FileProcessingError):
    status_code = 413


@dataclass
class ProcessedFile:
    content: str
    file_type: str
    mime_type: str
    word_count: int
    size: int


def _resolve_ext(filename: str, content_type: Optional[str]) -> str:
    ext = Path(filename or "").suffix.lower()
    if ext in SUPPORTED:
        return ext
    if not ext:
        ct = (content_type or "").split(";")[0].strip().lower()
        if ct in CT_TO_EXT:
            return CT_TO_EXT[ct]
    raise UnsupportedFileType("Only .txt, .md and .docx files are allowed")


def _docx_text(data: bytes) -> str:
    try:
        document = docx.Document(io.BytesIO(data))
    except Exception as e:
        logger.warning("Could not read DOCX upload: %r", e)
        raise FileProcessingError("Could not read .docx file")
    return "\n".join(p.text for p in document.paragraphs)


def process_upload(filename: str, content_type: Optional[str], data: bytes) -> ProcessedFile:
    """
    Extract plain text from an uploaded transcript.
    Raises FileProcessingError (or a subclass) when the upload is unusable.
    """
    size = len(data)
    if size > settings.max_upload_bytes:
        raise FileTooLarge(f"File exceeds {settings.max_upload_mb}MB limit")

    ext = _resolve_ext(filename, content_type)
    kind, mime = SUPPORTED[ext]

    if kind == "docx":
        content = _docx_text(data)
    else:
        content = data.decode("utf-8", errors="replace")

    content = content.strip()
    if not content:
        raise FileProcessingError("File appears to be empty")

    words = word_count(content)
    if words > settings.max_words:
        raise FileProcessingError(f"File is too long. Maximum {settings.max_words:,} words allowed.")

    return ProcessedFile(content=content, file_type=kind, mime_type=mime, word_count=words, size=size)
