from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence

from .cells import cell_text, classify

UNRESOLVED = -1

# Order matters: synonyms are checked against each header left to right.
ROLE_KEYWORDS: Dict[str, Sequence[str]] = {
    "milestone": ("milestone", "m", "id", "phase"),
    "title": ("title", "name", "description", "phase name"),
    "scope": ("scope", "description", "details", "work"),
    "tasks": ("task", "tasks", "deliverable", "deliverables"),
    "exclusions": ("exclusion", "exclusions", "out of scope", "not included"),
    "hours": ("hour", "hours", "effort", "time", "estimated hours"),
    "price": ("price", "cost", "estimate", "budget", "amount", "price estimate"),
}


@dataclass(frozen=True)
class ColumnRoleMap:
    """Header index for each semantic role, ``-1`` when unresolved."""

    milestone: int = UNRESOLVED
    title: int = UNRESOLVED
    scope: int = UNRESOLVED
    tasks: int = UNRESOLVED
    exclusions: int = UNRESOLVED
    hours: int = UNRESOLVED
    price: int = UNRESOLVED

    def resolved(self) -> Dict[str, int]:
        return {role: index for role, index in vars(self).items() if index != UNRESOLVED}


def find_column_index(headers: Sequence[object], keywords: Sequence[str]) -> int:
    """Return the first header index containing any keyword, else ``-1``."""

    for index, header in enumerate(headers):
        label = cell_text(classify(header)).lower().strip()
        if any(keyword in label for keyword in keywords):
            return index
    return UNRESOLVED


def resolve_column_roles(headers: Sequence[object]) -> ColumnRoleMap:
    return ColumnRoleMap(
        **{role: find_column_index(headers, keywords) for role, keywords in ROLE_KEYWORDS.items()}
    )


__all__ = ["ColumnRoleMap", "ROLE_KEYWORDS", "UNRESOLVED", "find_column_index", "resolve_column_roles"]
