"""Field extraction for a single milestone segment of free text.

Every helper here degrades to a default instead of raising: a segment with
no recognizable structure still produces a usable :class:`MilestoneRecord`.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Pattern, Sequence

from .models import MilestoneRecord, Segment

TITLE_LIMIT = 100
SCOPE_PREVIEW = 500
SCOPE_LIMIT = 2000
TASK_MIN_LENGTH = 5
TASK_MAX_LENGTH = 200
TASK_LIMIT = 20
EXCLUSION_MIN_LENGTH = 5
EXCLUSION_LIMIT = 10

NO_SCOPE_TEXT = "Scope details extracted from document"
NO_TASKS_TEXT = "Tasks extracted from document content."
TABLE_SCOPE_TEXT = "Scope from document"
TABLE_TASKS_TEXT = "Tasks from document"

LINE_SPLIT_PATTERN = re.compile(r"\n|\. ")
# A "line" ends at a newline or a sentence break, matching LINE_SPLIT_PATTERN.
_LINE_END = r"(?=\n|\.\s|\.?$)"

TASK_PATTERNS: Sequence[Pattern[str]] = (
    re.compile(
        r"\b(?:tasks?|deliverables?|items?)\s*:\s*(?P<text>.+?)" + _LINE_END,
        re.IGNORECASE | re.MULTILINE,
    ),
    re.compile(
        r"(?:^|(?<=\s))(?:•\s*|[-*]\s+)(?P<text>.+?)(?=\n|\s[-•*]\s|\.\s|\.?$)",
        re.MULTILINE,
    ),
    re.compile(
        r"(?:^|(?<=\s))\d+[.)]\s+(?P<text>.+?)(?=\n|\s\d+[.)]\s|\.\s|\.?$)",
        re.MULTILINE,
    ),
)
EXCLUSION_PATTERN = re.compile(
    r"\b(?:exclusions?|out of scope|not included|excluded)\s*:\s*(?P<text>.+?)" + _LINE_END,
    re.IGNORECASE | re.MULTILINE,
)
HOURS_PATTERNS: Sequence[Pattern[str]] = (
    re.compile(r"\b(?P<value>\d+)\s*(?:hours?|hrs?|h)\b", re.IGNORECASE),
    re.compile(r"\b(?:hours?|hrs?|effort)\s*:\s*(?P<value>\d+)", re.IGNORECASE),
)
PRICE_PATTERNS: Sequence[Pattern[str]] = (
    re.compile(r"\$\s*(?P<value>[\d,]+(?:\.\d{2})?)"),
    re.compile(
        r"\b(?:price|cost|budget|amount)\s*:\s*\$?\s*(?P<value>[\d,]+(?:\.\d{2})?)",
        re.IGNORECASE,
    ),
    re.compile(r"\bUSD\s*(?P<value>[\d,]+(?:\.\d{2})?)", re.IGNORECASE),
)


def normalize_label(label: str) -> str:
    label = label.strip()
    return label if label.startswith("M") else f"M{label}"


def extract_title(content: str, label: str) -> str:
    lines = [line.strip() for line in LINE_SPLIT_PATTERN.split(content) if line.strip()]
    if not lines:
        return f"Milestone {label}"
    return lines[0][:TITLE_LIMIT]


def extract_scope(content: str, title: str) -> str:
    body = content.strip()
    scope = body[len(title):].lstrip(". \n").strip() or body[:SCOPE_PREVIEW] or NO_SCOPE_TEXT
    return scope[:SCOPE_LIMIT]


def _collect(patterns: Iterable[Pattern[str]], content: str, accept) -> List[str]:
    found: List[str] = []
    for pattern in patterns:
        for match in pattern.finditer(content):
            text = match.group("text").strip()
            if accept(text):
                found.append(text)
    return found


def extract_tasks(content: str) -> List[str]:
    tasks = _collect(
        TASK_PATTERNS,
        content,
        lambda text: TASK_MIN_LENGTH < len(text) <= TASK_MAX_LENGTH,
    )
    return tasks[:TASK_LIMIT] or [NO_TASKS_TEXT]


def extract_exclusions(content: str) -> List[str]:
    exclusions = _collect((EXCLUSION_PATTERN,), content, lambda text: len(text) > EXCLUSION_MIN_LENGTH)
    return exclusions[:EXCLUSION_LIMIT]


def extract_hours(content: str) -> int:
    """Largest hour figure mentioned; smaller figures are assumed to be sub-estimates."""

    values = [int(match.group("value")) for pattern in HOURS_PATTERNS for match in pattern.finditer(content)]
    return max(values, default=0)


def _amount(raw: str) -> float:
    try:
        return float(raw.replace(",", ""))
    except ValueError:
        return 0.0


def extract_price(content: str) -> float:
    values = [_amount(match.group("value")) for pattern in PRICE_PATTERNS for match in pattern.finditer(content)]
    return max(values, default=0.0)


def parse_milestone_content(content: str, label: str, position: int) -> MilestoneRecord:
    title = extract_title(content, label)
    return MilestoneRecord(
        id=f"m-{position}",
        milestone_label=normalize_label(label),
        title=title,
        scope=extract_scope(content, title),
        tasks=tuple(extract_tasks(content)),
        exclusions=tuple(extract_exclusions(content)),
        estimated_hours=float(extract_hours(content)),
        price_estimate=extract_price(content),
    )


def parse_table_row(cells: Sequence[str], position: int) -> MilestoneRecord:
    """Build a record from one row of a text-rendered table."""

    line = " ".join(cells)
    first = cells[0] if cells else ""
    second = cells[1] if len(cells) > 1 else ""
    return MilestoneRecord(
        id=f"m-{position}",
        milestone_label=first[:50] or f"M{position + 1}",
        title=second[:200] or first[:200] or "Untitled",
        scope=" ".join(cells[2:])[:1000] or TABLE_SCOPE_TEXT,
        tasks=(TABLE_TASKS_TEXT,),
        estimated_hours=float(extract_hours(line)),
        price_estimate=extract_price(line),
    )


def parse_segment(segment: Segment, position: int) -> MilestoneRecord:
    if segment.cells:
        return parse_table_row(segment.cells, position)
    return parse_milestone_content(segment.content, segment.label, position)


__all__ = [
    "extract_exclusions",
    "extract_hours",
    "extract_price",
    "extract_scope",
    "extract_tasks",
    "extract_title",
    "normalize_label",
    "parse_milestone_content",
    "parse_segment",
    "parse_table_row",
]
