from __future__ import annotations

from typing import Iterable

from .models import Ballpark, MilestoneRecord


def compute_ballpark(milestones: Iterable[MilestoneRecord]) -> Ballpark:
    """Sum effort and price across milestones without rounding."""

    hours = 0.0
    price = 0.0
    for milestone in milestones:
        hours += milestone.estimated_hours
        price += milestone.price_estimate
    return Ballpark(hours=hours, price=price)


__all__ = ["compute_ballpark"]
