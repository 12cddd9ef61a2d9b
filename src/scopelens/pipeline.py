"""Format dispatch and ProjectRecord assembly."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .aggregate import compute_ballpark
from .ai import RemoteExtractor
from .config import ScopeLensConfig
from .decoders import read_grid, read_pdf_text
from .errors import RemoteExtractionError, UnsupportedFormatError
from .fallback import DocumentFormat, ensure_milestones
from .models import Ballpark, MilestoneRecord, ProjectRecord
from .segmenter import extract_milestones_from_text
from .tabular import extract_milestones_from_grid

LOGGER = logging.getLogger(__name__)

SPREADSHEET_SUFFIXES = {".xlsx", ".xls"}
PDF_MIME_TYPE = "application/pdf"
UNSUPPORTED_MESSAGE = "Unsupported file type. Please upload Excel (.xlsx, .xls) or PDF files."

DEFAULT_MIME_TYPES = {
    DocumentFormat.SPREADSHEET: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    DocumentFormat.PDF: PDF_MIME_TYPE,
}


def detect_format(file_name: str, mime_type: Optional[str] = None) -> DocumentFormat:
    """Classify an upload by MIME type or file extension."""

    mime = (mime_type or "").lower()
    suffix = Path(file_name).suffix.lower()
    if "excel" in mime or "spreadsheet" in mime or suffix in SPREADSHEET_SUFFIXES:
        return DocumentFormat.SPREADSHEET
    if mime == PDF_MIME_TYPE or suffix == ".pdf":
        return DocumentFormat.PDF
    raise UnsupportedFormatError(UNSUPPORTED_MESSAGE)


def extract_milestones(data: bytes, file_name: str, document_format: DocumentFormat) -> List[MilestoneRecord]:
    """Run the heuristic engine over decoded file contents."""

    if document_format is DocumentFormat.SPREADSHEET:
        return extract_milestones_from_grid(read_grid(data, file_name))
    return extract_milestones_from_text(read_pdf_text(data))


def extract_project(
    data: bytes,
    file_name: str,
    mime_type: Optional[str] = None,
    *,
    config: Optional[ScopeLensConfig] = None,
    remote: Optional[RemoteExtractor] = None,
    now: Optional[datetime] = None,
) -> ProjectRecord:
    """Extract a :class:`ProjectRecord` from an uploaded document.

    The remote extractor is preferred when it is enabled and configured; any
    remote failure is logged and the heuristic engine is used instead.
    Unsupported formats and undecodable files raise
    :class:`~scopelens.errors.ExtractionError` subclasses.
    """

    document_format = detect_format(file_name, mime_type)
    config = config or ScopeLensConfig()
    remote = remote or RemoteExtractor(config.ai)
    LOGGER.info("Extracting milestones from %s (%s)", file_name, document_format.value)

    milestones: Optional[List[MilestoneRecord]] = None
    total: Optional[Ballpark] = None
    if remote.available:
        try:
            result = remote.extract(
                data,
                mime_type or DEFAULT_MIME_TYPES[document_format],
                file_name,
                document_format,
            )
        except RemoteExtractionError as exc:
            LOGGER.warning("Remote extraction unavailable; using heuristics: %s", exc)
        else:
            milestones = result.milestones
            total = result.total_ballpark

    if milestones is None:
        milestones = extract_milestones(data, file_name, document_format)

    milestones = ensure_milestones(milestones, document_format)
    if total is None:
        total = compute_ballpark(milestones)
    LOGGER.info("Extracted %d milestone(s) from %s", len(milestones), file_name)

    return ProjectRecord(
        file_name=file_name,
        upload_date=now or datetime.now(timezone.utc),
        milestones=tuple(milestones),
        total_ballpark=total,
    )


__all__ = ["detect_format", "extract_milestones", "extract_project", "UNSUPPORTED_MESSAGE"]
