from __future__ import annotations

from enum import Enum
from typing import Iterable, List

import pandas as pd

from .aggregate import compute_ballpark
from .models import MilestoneRecord, ProjectRecord

COLUMNS = ["MILESTONE", "TITLE", "HOURS", "PRICE", "TASKS", "EXCLUSIONS"]


class SortOption(str, Enum):
    ORDER = "order"
    HOURS = "hours"
    PRICE = "price"


def filter_milestones(milestones: Iterable[MilestoneRecord], term: str) -> List[MilestoneRecord]:
    """Case-insensitive match on milestone label or title."""
    needle = term.strip().lower()
    return [
        milestone
        for milestone in milestones
        if needle in milestone.milestone_label.lower() or needle in milestone.title.lower()
    ]


def sort_milestones(milestones: Iterable[MilestoneRecord], option: SortOption = SortOption.ORDER) -> List[MilestoneRecord]:
    result = list(milestones)
    if option is SortOption.HOURS:
        result.sort(key=lambda milestone: milestone.estimated_hours, reverse=True)
    elif option is SortOption.PRICE:
        result.sort(key=lambda milestone: milestone.price_estimate, reverse=True)
    return result


def milestones_frame(milestones: Iterable[MilestoneRecord]) -> pd.DataFrame:
    rows = [
        {
            "MILESTONE": milestone.milestone_label,
            "TITLE": milestone.title,
            "HOURS": milestone.estimated_hours,
            "PRICE": milestone.price_estimate,
            "TASKS": len(milestone.tasks),
            "EXCLUSIONS": len(milestone.exclusions),
        }
        for milestone in milestones
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def make_summary_text(project: ProjectRecord, milestones: Iterable[MilestoneRecord] | None = None) -> str:
    frame = milestones_frame(project.milestones if milestones is None else milestones)
    total = project.total_ballpark or compute_ballpark(project.milestones)
    top = frame.sort_values("PRICE", ascending=False, kind="stable").head(5)[
        ["MILESTONE", "TITLE", "HOURS", "PRICE"]
    ]
    return (
        f"{project.file_name}: {len(project.milestones)} milestone(s), "
        f"{total.hours:,.1f} hours, ${total.price:,.2f}.\n"
        f"Milestones:\n{frame.to_string(index=False)}\n"
        f"Top cost drivers:\n{top.to_string(index=False)}\n"
    )


__all__ = ["SortOption", "filter_milestones", "sort_milestones", "milestones_frame", "make_summary_text"]
