from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace
from typing import Callable, List, Sequence

import pandas as pd
import pytest
from reportlab.pdfgen import canvas

from scopelens.config import AIConfig, HistoryConfig, ScopeLensConfig


@pytest.fixture
def scope_config(tmp_path: Path) -> ScopeLensConfig:
    return ScopeLensConfig(
        ai=AIConfig(enabled=False),
        history=HistoryConfig(path=tmp_path / "history.json"),
    )


@pytest.fixture
def pdf_factory(tmp_path: Path) -> Callable[[str, str], Path]:
    def _create(filename: str, text: str) -> Path:
        pdf_path = tmp_path / filename
        pdf_path.parent.mkdir(parents=True, exist_ok=True)
        canv = canvas.Canvas(str(pdf_path))
        y = 800
        for line in text.splitlines():
            canv.drawString(72, y, line)
            y -= 18
        canv.showPage()
        canv.save()
        return pdf_path

    return _create


@pytest.fixture
def xlsx_factory(tmp_path: Path) -> Callable[[str, Sequence[Sequence[object]]], Path]:
    def _create(filename: str, rows: Sequence[Sequence[object]]) -> Path:
        path = tmp_path / filename
        pd.DataFrame(list(rows)).to_excel(path, index=False, header=False)
        return path

    return _create


class _StubResponses:
    def __init__(self, handler: Callable[[dict], object]) -> None:
        self.handler = handler
        self.calls: List[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        return self.handler(kwargs)


class StubClient:
    """Stands in for ``openai.OpenAI`` with a scripted ``responses.create``."""

    def __init__(self, handler: Callable[[dict], object]) -> None:
        self.responses = _StubResponses(handler)


@pytest.fixture
def stub_client() -> Callable[..., StubClient]:
    def _create(payload: object = None, error: Exception | None = None) -> StubClient:
        def handler(_kwargs: dict) -> object:
            if error is not None:
                raise error
            text = payload if isinstance(payload, str) else json.dumps(payload)
            return SimpleNamespace(output_text=text)

        return StubClient(handler)

    return _create
