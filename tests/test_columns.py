from __future__ import annotations

from scopelens.columns import UNRESOLVED, ColumnRoleMap, find_column_index, resolve_column_roles


def test_resolve_roles_for_minimal_header() -> None:
    roles = resolve_column_roles(["Milestone", "Title", "Hours", "Price"])

    assert roles == ColumnRoleMap(milestone=0, title=1, hours=2, price=3)
    assert roles.scope == UNRESOLVED
    assert roles.tasks == UNRESOLVED
    assert roles.exclusions == UNRESOLVED


def test_resolve_roles_for_full_header() -> None:
    roles = resolve_column_roles(
        ["Phase", "Name", "Work Details", "Deliverables", "Not Included", "Effort", "Budget"]
    )

    assert roles.resolved() == {
        "milestone": 0,
        "title": 1,
        "scope": 2,
        "tasks": 3,
        "exclusions": 4,
        "hours": 5,
        "price": 6,
    }


def test_leftmost_column_wins_shared_synonym() -> None:
    roles = resolve_column_roles(["Description", "Scope"])

    assert roles.title == 0
    assert roles.scope == 0


def test_find_column_index_matches_substrings_case_insensitively() -> None:
    assert find_column_index(["Notes", "  TOTAL AMOUNT "], ("price", "amount")) == 1
    assert find_column_index([None, 5, "Estimated Hours"], ("hour",)) == 2
    assert find_column_index(["Notes", "Owner"], ("price",)) == UNRESOLVED
    assert find_column_index([], ("price",)) == UNRESOLVED
