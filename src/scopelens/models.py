from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence, Tuple


def _to_number(value: object) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if number != number or number < 0:  # NaN or negative
        return 0.0
    return number


def _to_strings(values: object) -> Tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        values = [values]
    return tuple(str(value).strip() for value in values if str(value).strip())  # type: ignore[union-attr]


@dataclass(frozen=True)
class MilestoneRecord:
    """One milestone row or section extracted from a scope document."""

    id: str
    milestone_label: str
    title: str
    scope: str
    tasks: Tuple[str, ...]
    exclusions: Tuple[str, ...] = ()
    estimated_hours: float = 0.0
    price_estimate: float = 0.0

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "milestone": self.milestone_label,
            "title": self.title,
            "scope": self.scope,
            "tasks": list(self.tasks),
            "exclusions": list(self.exclusions),
            "estimatedHours": self.estimated_hours,
            "priceEstimate": self.price_estimate,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, object], index: int = 0) -> "MilestoneRecord":
        label = raw.get("milestone") or raw.get("milestoneLabel") or ""
        return cls(
            id=str(raw.get("id") or f"m-{index}"),
            milestone_label=str(label).strip(),
            title=str(raw.get("title") or "").strip(),
            scope=str(raw.get("scope") or "").strip(),
            tasks=_to_strings(raw.get("tasks")),
            exclusions=_to_strings(raw.get("exclusions")),
            estimated_hours=_to_number(raw.get("estimatedHours")),
            price_estimate=_to_number(raw.get("priceEstimate")),
        )


@dataclass(frozen=True)
class Ballpark:
    """Aggregate effort and cost across a project."""

    hours: float
    price: float

    def to_dict(self) -> Dict[str, float]:
        return {"hours": self.hours, "price": self.price}

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> "Ballpark":
        return cls(hours=_to_number(raw.get("hours")), price=_to_number(raw.get("price")))


@dataclass(frozen=True)
class ProjectRecord:
    """Normalized result of extracting one uploaded document."""

    file_name: str
    upload_date: datetime
    milestones: Tuple[MilestoneRecord, ...]
    total_ballpark: Optional[Ballpark] = None

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "fileName": self.file_name,
            "uploadDate": self.upload_date.isoformat(),
            "milestones": [milestone.to_dict() for milestone in self.milestones],
        }
        if self.total_ballpark is not None:
            payload["totalBallpark"] = self.total_ballpark.to_dict()
        return payload

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> "ProjectRecord":
        upload_date = raw.get("uploadDate")
        if isinstance(upload_date, datetime):
            parsed_date = upload_date
        elif upload_date:
            parsed_date = datetime.fromisoformat(str(upload_date).replace("Z", "+00:00"))
        else:
            parsed_date = datetime.now(timezone.utc)
        milestones: Sequence[Mapping[str, object]] = raw.get("milestones") or []  # type: ignore[assignment]
        ballpark = raw.get("totalBallpark")
        return cls(
            file_name=str(raw.get("fileName") or ""),
            upload_date=parsed_date,
            milestones=tuple(
                MilestoneRecord.from_dict(item, index) for index, item in enumerate(milestones)
            ),
            total_ballpark=Ballpark.from_dict(ballpark) if isinstance(ballpark, Mapping) else None,
        )


@dataclass(frozen=True)
class Segment:
    """Span of document text attributed to one milestone."""

    label: str
    content: str
    cells: Tuple[str, ...] = field(default=())


__all__ = ["MilestoneRecord", "Ballpark", "ProjectRecord", "Segment"]
