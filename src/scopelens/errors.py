from __future__ import annotations


class ExtractionError(RuntimeError):
    """Base class for failures that abort an extraction call."""


class UnsupportedFormatError(ExtractionError, ValueError):
    """Raised when a file is neither a spreadsheet nor a PDF."""


class DecodeError(ExtractionError):
    """Raised when the file bytes cannot be decoded by the format library."""


class RemoteExtractionError(ExtractionError):
    """Raised when the remote extraction service fails or returns bad data."""


__all__ = ["ExtractionError", "UnsupportedFormatError", "DecodeError", "RemoteExtractionError"]
