"""Decode uploaded bytes into a cell grid or page-ordered text."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd
from PyPDF2 import PdfReader

from .errors import DecodeError

LOGGER = logging.getLogger(__name__)

ENCRYPTED_HINT = "the PDF file may be corrupted or encrypted"


def _excel_engine(file_name: str) -> Optional[str]:
    suffix = Path(file_name).suffix.lower()
    if suffix == ".xls":
        return "xlrd"
    if suffix in {".xlsx", ".xlsm"}:
        return "openpyxl"
    return None  # let pandas sniff the workbook signature


def read_grid(data: bytes, file_name: str = "") -> List[List[object]]:
    """Return the first worksheet as a list of rows of raw cell values."""

    try:
        frame = pd.read_excel(
            io.BytesIO(data),
            sheet_name=0,
            header=None,
            dtype=object,
            engine=_excel_engine(file_name),
        )
    except Exception as exc:
        raise DecodeError(f"Failed to parse Excel file: {exc}") from exc
    LOGGER.debug("Decoded worksheet with shape %s", frame.shape)
    return frame.to_numpy(dtype=object).tolist()


def read_pdf_text(data: bytes) -> str:
    """Extract text page by page, joining pages in document order."""

    try:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted and not reader.decrypt(""):
            raise DecodeError(f"Failed to parse PDF file: {ENCRYPTED_HINT}")
        pages: List[str] = []
        for page in reader.pages:
            pages.append(page.extract_text() or "")
    except DecodeError:
        raise
    except Exception as exc:
        raise DecodeError(f"Failed to parse PDF file: {exc} ({ENCRYPTED_HINT})") from exc
    LOGGER.debug("Extracted %d characters from %d PDF pages", sum(map(len, pages)), len(pages))
    return "\n".join(pages)


__all__ = ["read_grid", "read_pdf_text"]
