"""Milestone extraction from spreadsheet grids."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from .cells import EMPTY, Cell, cell_items, cell_text, normalize_row
from .columns import UNRESOLVED, ColumnRoleMap, resolve_column_roles
from .fallback import PLACEHOLDER_TASK, grid_placeholder
from .models import MilestoneRecord

LOGGER = logging.getLogger(__name__)

HEADER_KEYWORDS = ("milestone", "title", "scope", "task", "hour", "price", "cost", "estimate")
HEADER_SCAN_ROWS = 10

LEADING_NUMBER_PATTERN = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)")
NON_PRICE_CHARS = re.compile(r"[^0-9.]")

NO_SCOPE_TEXT = "No scope description provided."


def find_header_row(grid: Sequence[Sequence[Cell]]) -> int:
    for index, row in enumerate(grid[:HEADER_SCAN_ROWS]):
        row_text = " ".join(cell_text(cell) for cell in row).lower()
        if any(keyword in row_text for keyword in HEADER_KEYWORDS):
            return index
    return 0


def parse_hours(text: str) -> float:
    match = LEADING_NUMBER_PATTERN.match(text)
    if not match:
        return 0.0
    try:
        value = float(match.group(0))
    except ValueError:
        return 0.0
    return max(value, 0.0)


def parse_price(text: str) -> float:
    stripped = NON_PRICE_CHARS.sub("", text)
    if not stripped:
        return 0.0
    try:
        return float(stripped)
    except ValueError:
        return 0.0


def _cell_at(row: Sequence[Cell], index: int) -> Cell:
    if index == UNRESOLVED or index >= len(row):
        return EMPTY
    return row[index]


def _build_row(row: Sequence[Cell], roles: ColumnRoleMap, position: int) -> Optional[MilestoneRecord]:
    milestone = cell_text(_cell_at(row, roles.milestone))
    title = cell_text(_cell_at(row, roles.title))
    if not milestone and not title:
        return None

    number = position + 1
    scope = cell_text(_cell_at(row, roles.scope)) or title or NO_SCOPE_TEXT
    label = milestone or f"Milestone {number}"
    title = title or milestone or f"Untitled Milestone {number}"
    tasks = cell_items(_cell_at(row, roles.tasks))
    exclusions = cell_items(_cell_at(row, roles.exclusions))

    return MilestoneRecord(
        id=f"m-{position}",
        milestone_label=label,
        title=title,
        scope=scope,
        tasks=tuple(tasks) or (PLACEHOLDER_TASK,),
        exclusions=tuple(exclusions),
        estimated_hours=parse_hours(cell_text(_cell_at(row, roles.hours))),
        price_estimate=parse_price(cell_text(_cell_at(row, roles.price))),
    )


def extract_milestones_from_grid(grid: Sequence[Sequence[object]]) -> List[MilestoneRecord]:
    """Extract milestones from a worksheet given as a sequence of rows."""

    rows = [normalize_row(row) for row in (grid or [])]
    milestones: List[MilestoneRecord] = []
    if rows:
        header_index = find_header_row(rows)
        roles = resolve_column_roles(rows[header_index])
        LOGGER.debug("Header row %d resolved roles %s", header_index, roles.resolved())

        for row in rows[header_index + 1 :]:
            if not any(cell_text(cell) for cell in row):
                continue
            record = _build_row(row, roles, len(milestones))
            if record is not None:
                milestones.append(record)

    if not milestones:
        LOGGER.info("No milestone rows found in worksheet; using placeholder")
        return [grid_placeholder()]
    return milestones


__all__ = [
    "HEADER_KEYWORDS",
    "extract_milestones_from_grid",
    "find_header_row",
    "parse_hours",
    "parse_price",
]
