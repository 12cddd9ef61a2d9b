"""Guarantees that every extraction yields at least one well-formed milestone."""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Iterable, List

from .models import MilestoneRecord

LOGGER = logging.getLogger(__name__)

PLACEHOLDER_TASK = "Task details not found in document."


class DocumentFormat(str, Enum):
    SPREADSHEET = "spreadsheet"
    PDF = "pdf"


def grid_placeholder() -> MilestoneRecord:
    return MilestoneRecord(
        id="m-0",
        milestone_label="M1",
        title="Project Data",
        scope=(
            "Data extracted from Excel file. Please ensure your Excel file has columns: "
            "Milestone, Title, Scope, Tasks, Hours, Price."
        ),
        tasks=("Review extracted data",),
    )


def text_placeholder() -> MilestoneRecord:
    return MilestoneRecord(
        id="m-0",
        milestone_label="M1",
        title="Document Content",
        scope="No readable text found in PDF. The document may be image-based or encrypted.",
        tasks=("Please ensure PDF contains readable text",),
    )


def placeholder_for(document_format: DocumentFormat) -> MilestoneRecord:
    if document_format is DocumentFormat.SPREADSHEET:
        return grid_placeholder()
    return text_placeholder()


def _repair(record: MilestoneRecord, position: int) -> MilestoneRecord:
    number = position + 1
    label = record.milestone_label.strip() or f"Milestone {number}"
    title = record.title.strip() or label
    return replace(
        record,
        id=f"m-{position}",
        milestone_label=label,
        title=title,
        scope=record.scope.strip() or title,
        tasks=record.tasks or (PLACEHOLDER_TASK,),
        estimated_hours=max(record.estimated_hours, 0.0),
        price_estimate=max(record.price_estimate, 0.0),
    )


def ensure_milestones(
    milestones: Iterable[MilestoneRecord], document_format: DocumentFormat
) -> List[MilestoneRecord]:
    """Return repaired milestones, or a single diagnostic record if there are none."""

    repaired = [_repair(record, position) for position, record in enumerate(milestones)]
    if not repaired:
        LOGGER.info("No milestones extracted from %s input; emitting fallback record", document_format.value)
        return [placeholder_for(document_format)]
    return repaired


__all__ = [
    "DocumentFormat",
    "ensure_milestones",
    "grid_placeholder",
    "placeholder_for",
    "text_placeholder",
]
