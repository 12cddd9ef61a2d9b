"""Persistent, capped history of extracted projects."""
from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_HISTORY_LIMIT
from .models import ProjectRecord

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    created_at: str
    project: ProjectRecord

    def to_dict(self) -> dict:
        return {"id": self.id, "createdAt": self.created_at, **self.project.to_dict()}

    @classmethod
    def from_dict(cls, raw: dict) -> "HistoryEntry":
        return cls(
            id=str(raw["id"]),
            created_at=str(raw.get("createdAt") or ""),
            project=ProjectRecord.from_dict(raw),
        )


class HistoryStore:
    """Most-recent-first JSON history; the oldest entries are evicted past the cap."""

    def __init__(self, path: Path, max_entries: int = DEFAULT_HISTORY_LIMIT) -> None:
        self.path = path
        self.max_entries = max(1, max_entries)

    def save(self, project: ProjectRecord) -> HistoryEntry:
        entry = HistoryEntry(
            id=f"project-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}",
            created_at=datetime.now(timezone.utc).isoformat(),
            project=project,
        )
        entries = [entry, *self.list()][: self.max_entries]
        self._write(entries)
        LOGGER.info("Saved %s to history as %s", project.file_name, entry.id)
        return entry

    def list(self) -> List[HistoryEntry]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
            items = raw.get("projects", [])
        except (OSError, ValueError, AttributeError) as exc:
            LOGGER.error("Error reading project history from %s: %s", self.path, exc)
            return []

        entries: List[HistoryEntry] = []
        for position, item in enumerate(items if isinstance(items, list) else []):
            try:
                entries.append(HistoryEntry.from_dict(item))
            except (ValueError, KeyError, TypeError, AttributeError) as exc:
                LOGGER.warning("Skipping unreadable history entry %d in %s: %s", position, self.path, exc)
        return entries

    def get(self, entry_id: str) -> Optional[ProjectRecord]:
        entry = next((item for item in self.list() if item.id == entry_id), None)
        return entry.project if entry else None

    def delete(self, entry_id: str) -> bool:
        entries = self.list()
        remaining = [item for item in entries if item.id != entry_id]
        if len(remaining) == len(entries):
            LOGGER.debug("History entry %s not found", entry_id)
            return False
        self._write(remaining)
        return True

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()

    def _write(self, entries: List[HistoryEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"projects": [entry.to_dict() for entry in entries]}
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)


__all__ = ["HistoryEntry", "HistoryStore"]
