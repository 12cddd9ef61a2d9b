"""Milestone, effort and cost extraction from project scope documents."""

from .aggregate import compute_ballpark
from .config import AIConfig, HistoryConfig, ScopeLensConfig, load_config
from .errors import DecodeError, ExtractionError, RemoteExtractionError, UnsupportedFormatError
from .history import HistoryEntry, HistoryStore
from .models import Ballpark, MilestoneRecord, ProjectRecord
from .pipeline import detect_format, extract_project

__all__ = [
    "AIConfig",
    "Ballpark",
    "DecodeError",
    "ExtractionError",
    "HistoryConfig",
    "HistoryEntry",
    "HistoryStore",
    "MilestoneRecord",
    "ProjectRecord",
    "RemoteExtractionError",
    "ScopeLensConfig",
    "UnsupportedFormatError",
    "compute_ballpark",
    "detect_format",
    "extract_project",
    "load_config",
]
