"""Normalization of decoded spreadsheet cells.

Spreadsheet decoders hand back loosely typed values: numbers, strings,
``None``/NaN for blanks and occasionally embedded lists.  Each value is
classified once into :data:`Cell` so the extraction code only ever deals
with plain text.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Tuple, Union


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class NestedList:
    items: Tuple["Cell", ...]


Cell = Union[Empty, Number, Text, NestedList]

EMPTY = Empty()


def classify(value: object) -> Cell:
    """Return the tagged variant for a raw decoded cell value."""

    if value is None:
        return EMPTY
    if isinstance(value, (Empty, Number, Text, NestedList)):
        return value
    if isinstance(value, bool):
        return Text("TRUE" if value else "FALSE")
    if isinstance(value, numbers.Real):
        number = float(value)
        if math.isnan(number):
            return EMPTY
        return Number(number)
    if isinstance(value, (list, tuple)):
        return NestedList(tuple(classify(item) for item in value))
    if isinstance(value, (datetime, date)):
        return Text(value.isoformat())
    try:
        text = str(value)
    except Exception:  # pragma: no cover - exotic objects
        return EMPTY
    if text.strip().lower() in {"nan", "nat"}:
        return EMPTY
    return Text(text)


def _format_number(value: float) -> str:
    if math.isinf(value):
        return str(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def cell_text(cell: Cell) -> str:
    """Flatten a cell to trimmed display text."""

    if isinstance(cell, Number):
        return _format_number(cell.value)
    if isinstance(cell, Text):
        return cell.value.strip()
    if isinstance(cell, NestedList):
        return ", ".join(text for text in (cell_text(item) for item in cell.items) if text)
    return ""


def cell_items(cell: Cell) -> List[str]:
    """Split a cell into list entries (comma separated text or nested lists)."""

    if isinstance(cell, NestedList):
        return [text for text in (cell_text(item) for item in cell.items) if text]
    return [part.strip() for part in cell_text(cell).split(",") if part.strip()]


def normalize_row(row: object) -> List[Cell]:
    if row is None:
        return []
    if isinstance(row, (str, bytes)):
        return [classify(row)]
    try:
        return [classify(value) for value in row]  # type: ignore[union-attr]
    except TypeError:
        return [classify(row)]


__all__ = [
    "Cell",
    "Empty",
    "Number",
    "Text",
    "NestedList",
    "EMPTY",
    "classify",
    "cell_text",
    "cell_items",
    "normalize_row",
]
