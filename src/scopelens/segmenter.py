"""Split document text into per-milestone segments.

Segmentation runs an ordered list of independent strategies.  Each strategy
is a pure function of the document text returning candidate segments; the
first strategy that produces enough candidates wins and the rest are
skipped.  The final strategy always succeeds, so every non-empty document
yields at least one segment.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Pattern, Sequence, Tuple

from .content import parse_segment
from .fallback import text_placeholder
from .models import MilestoneRecord, Segment
from .tabular import HEADER_KEYWORDS

LOGGER = logging.getLogger(__name__)

WHITESPACE_PATTERN = re.compile(r"\s+")
ANCHOR_WORDS = ("milestone", "m", "phase", "stage")
TABLE_HEADER_KEYWORDS = HEADER_KEYWORDS
TABLE_HEADER_SCAN_LINES = 20
TABLE_MIN_LINE_LENGTH = 10
TABLE_CELL_SPLIT = re.compile(r"\t|\s{2,}")
NUMBERED_SECTION_PATTERN = re.compile(
    r"(?P<id>\d+)[.)]\s+(?P<body>[A-Z][^0-9]{20,500})(?=\d+[.)]|\Z)"
)


@dataclass(frozen=True)
class DocumentText:
    """Decoded text in both line-preserving and whitespace-collapsed form."""

    raw: str
    normalized: str

    @classmethod
    def from_raw(cls, raw: str) -> "DocumentText":
        return cls(raw=raw, normalized=normalize_text(raw))


Strategy = Callable[[DocumentText], List[Segment]]


def normalize_text(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def _anchor_pattern(anchor: str) -> Pattern[str]:
    # An identifier is a number (``Milestone 2``, ``M-2``, ``Milestone #2``) or a
    # separate word (``Phase Alpha``, ``Phase-Alpha``); a bare ``Phase:`` leaves it
    # empty.
    separator = r"\s*(?:[-#]\s*)?"
    head = rf"\b{anchor}(?:{separator}(?P<id>\d[\w-]*|(?<=[\s#-])[A-Za-z][\w-]*)|(?=\s*:))"
    boundary = rf"\b{anchor}(?:{separator}(?:\d|(?<=[\s#-])[A-Za-z])|\s*:)"
    return re.compile(
        head + r"[:.\s]+(?P<body>.*?)(?=" + boundary + r"|\Z)",
        re.IGNORECASE | re.DOTALL,
    )


ANCHOR_PATTERNS: Sequence[Tuple[str, Pattern[str]]] = tuple(
    (anchor, _anchor_pattern(anchor)) for anchor in ANCHOR_WORDS
)


def anchored_sections(document: DocumentText) -> List[Segment]:
    """Sections introduced by ``Milestone N``, ``M N``, ``Phase N`` or ``Stage N``."""

    for anchor, pattern in ANCHOR_PATTERNS:
        segments = [
            Segment(label=match.group("id") or str(occurrence), content=match.group("body"))
            for occurrence, match in enumerate(pattern.finditer(document.normalized), start=1)
        ]
        if segments:
            LOGGER.debug("Anchor %r matched %d sections", anchor, len(segments))
            return segments
    return []


def table_rows(document: DocumentText) -> List[Segment]:
    """Rows of a text-rendered table found below a header-like line."""

    lines = [line.strip() for line in document.raw.splitlines() if line.strip()]
    header_index = next(
        (
            index
            for index, line in enumerate(lines[:TABLE_HEADER_SCAN_LINES])
            if any(keyword in line.lower() for keyword in TABLE_HEADER_KEYWORDS)
        ),
        None,
    )
    if header_index is None:
        return []

    segments: List[Segment] = []
    for line in lines[header_index + 1 :]:
        if len(line) < TABLE_MIN_LINE_LENGTH:
            continue
        cells = tuple(part.strip() for part in TABLE_CELL_SPLIT.split(line) if part.strip())
        if len(cells) >= 2:
            segments.append(Segment(label=cells[0], content=line, cells=cells))
    return segments


def numbered_sections(document: DocumentText) -> List[Segment]:
    """Sections introduced by ``1.`` or ``1)`` followed by capitalized prose."""

    return [
        Segment(label=f"M{match.group('id')}", content=match.group("body"))
        for match in NUMBERED_SECTION_PATTERN.finditer(document.normalized)
    ]


def whole_document(document: DocumentText) -> List[Segment]:
    return [Segment(label="M1", content=document.normalized)]


# (name, strategy, minimum number of segments for the result to be accepted)
STRATEGIES: Sequence[Tuple[str, Strategy, int]] = (
    ("anchored", anchored_sections, 1),
    ("table", table_rows, 1),
    ("numbered", numbered_sections, 2),
    ("whole-document", whole_document, 1),
)


def segment_text(text: str) -> List[Segment]:
    document = DocumentText.from_raw(text)
    for name, strategy, minimum in STRATEGIES:
        segments = strategy(document)
        if len(segments) >= minimum:
            LOGGER.debug("Segmented document with %s strategy (%d segments)", name, len(segments))
            return segments
    return whole_document(document)


def extract_milestones_from_text(text: str) -> List[MilestoneRecord]:
    """Extract milestones from decoded document text."""

    if not text or not text.strip():
        LOGGER.info("Document contains no readable text; using placeholder")
        return [text_placeholder()]
    return [parse_segment(segment, position) for position, segment in enumerate(segment_text(text))]


__all__ = [
    "DocumentText",
    "STRATEGIES",
    "anchored_sections",
    "extract_milestones_from_text",
    "normalize_text",
    "numbered_sections",
    "segment_text",
    "table_rows",
    "whole_document",
]
