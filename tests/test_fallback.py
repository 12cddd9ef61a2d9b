from __future__ import annotations

from scopelens.aggregate import compute_ballpark
from scopelens.fallback import (
    PLACEHOLDER_TASK,
    DocumentFormat,
    ensure_milestones,
    grid_placeholder,
    text_placeholder,
)
from scopelens.models import Ballpark, MilestoneRecord


def _milestone(label: str, hours: float, price: float) -> MilestoneRecord:
    return MilestoneRecord(
        id="x",
        milestone_label=label,
        title=f"{label} title",
        scope="scope",
        tasks=("task",),
        estimated_hours=hours,
        price_estimate=price,
    )


def test_empty_input_yields_format_specific_placeholder() -> None:
    assert ensure_milestones([], DocumentFormat.SPREADSHEET) == [grid_placeholder()]
    assert ensure_milestones([], DocumentFormat.PDF) == [text_placeholder()]


def test_placeholders_are_well_formed() -> None:
    for placeholder in (grid_placeholder(), text_placeholder()):
        assert placeholder.milestone_label == "M1"
        assert placeholder.title
        assert placeholder.scope
        assert placeholder.tasks
        assert placeholder.estimated_hours == 0.0
        assert placeholder.price_estimate == 0.0


def test_incomplete_records_are_repaired() -> None:
    broken = MilestoneRecord(
        id="remote",
        milestone_label=" ",
        title="",
        scope="",
        tasks=(),
        estimated_hours=-3.0,
        price_estimate=10.0,
    )

    (repaired,) = ensure_milestones([broken], DocumentFormat.PDF)

    assert repaired.id == "m-0"
    assert repaired.milestone_label == "Milestone 1"
    assert repaired.title == "Milestone 1"
    assert repaired.scope == "Milestone 1"
    assert repaired.tasks == (PLACEHOLDER_TASK,)
    assert repaired.estimated_hours == 0.0
    assert repaired.price_estimate == 10.0


def test_ids_are_unique_and_ordered() -> None:
    milestones = ensure_milestones(
        [_milestone("A", 1, 1), _milestone("B", 2, 2), _milestone("C", 3, 3)],
        DocumentFormat.SPREADSHEET,
    )

    assert [m.id for m in milestones] == ["m-0", "m-1", "m-2"]
    assert [m.milestone_label for m in milestones] == ["A", "B", "C"]


def test_compute_ballpark_sums_without_rounding() -> None:
    milestones = [_milestone("A", 1.25, 100.10), _milestone("B", 2.5, 200.20)]

    total = compute_ballpark(milestones)

    assert total.hours == 1.25 + 2.5
    assert total.price == 100.10 + 200.20
    assert compute_ballpark([]) == Ballpark(hours=0.0, price=0.0)
