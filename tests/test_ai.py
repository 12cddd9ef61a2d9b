from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from pytest import MonkeyPatch

from scopelens.ai import RemoteExtractor
from scopelens.config import AIConfig
from scopelens.errors import RemoteExtractionError
from scopelens.fallback import DocumentFormat

PAYLOAD = {
    "milestones": [
        {
            "milestone": "M1",
            "title": "Discovery",
            "scope": "Stakeholder interviews",
            "tasks": ["Kickoff", "Interviews"],
            "exclusions": ["Travel"],
            "estimatedHours": 12,
            "priceEstimate": 1500.5,
        },
        {
            "milestone": "M2",
            "title": "Build",
            "scope": "Implementation",
            "tasks": ["Frontend"],
            "exclusions": [],
            "estimatedHours": 40,
            "priceEstimate": 6000,
        },
    ]
}


def _extractor(client=None, **overrides) -> RemoteExtractor:
    return RemoteExtractor(AIConfig(enabled=True, **overrides), client=client)


def test_parse_payload_assigns_ids_and_fields() -> None:
    result = _extractor(client=object()).parse_payload(json.dumps(PAYLOAD))

    assert [m.id for m in result.milestones] == ["m-0", "m-1"]
    assert result.milestones[0].tasks == ("Kickoff", "Interviews")
    assert result.milestones[0].exclusions == ("Travel",)
    assert result.milestones[1].price_estimate == 6000.0
    assert result.total_ballpark is None


def test_parse_payload_strips_code_fences() -> None:
    text = "```json\n" + json.dumps({**PAYLOAD, "totalBallpark": {"hours": 52, "price": 7500.5}}) + "\n```"

    result = _extractor(client=object()).parse_payload(text)

    assert len(result.milestones) == 2
    assert result.total_ballpark is not None
    assert result.total_ballpark.hours == 52.0


@pytest.mark.parametrize(
    "text",
    [
        "not json at all",
        json.dumps({"items": []}),
        json.dumps({"milestones": [{"milestone": "M1", "title": "Missing fields"}]}),
        json.dumps({"milestones": [{**PAYLOAD["milestones"][0], "estimatedHours": "twelve"}]}),
    ],
)
def test_parse_payload_rejects_bad_replies(text: str) -> None:
    with pytest.raises(RemoteExtractionError):
        _extractor(client=object()).parse_payload(text)


def test_availability(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    assert not RemoteExtractor(AIConfig(enabled=False), client=object()).available
    assert _extractor(client=object()).available
    assert not _extractor().available

    key_file = tmp_path / "key.txt"
    key_file.write_text("secret\n", encoding="utf-8")
    assert _extractor(api_key_path=key_file).available


def test_pdf_is_sent_as_inline_file(stub_client) -> None:
    client = stub_client(PAYLOAD)

    result = _extractor(client=client, model="test-model").extract(
        b"%PDF-1.4 body", "application/pdf", "scope.pdf", DocumentFormat.PDF
    )

    (call,) = client.responses.calls
    assert call["model"] == "test-model"
    user_content = call["input"][1]["content"]
    assert user_content[0]["type"] == "input_file"
    assert user_content[0]["file_data"].startswith("data:application/pdf;base64,")
    assert "scope.pdf" in user_content[1]["text"]
    assert len(result.milestones) == 2


def test_spreadsheet_is_sent_as_csv(stub_client, xlsx_factory) -> None:
    path = xlsx_factory("plan.xlsx", [["Milestone", "Title"], ["M1", "Design"]])
    client = stub_client(PAYLOAD)

    _extractor(client=client).extract(
        path.read_bytes(), "application/vnd.ms-excel", path.name, DocumentFormat.SPREADSHEET
    )

    (call,) = client.responses.calls
    (part,) = call["input"][1]["content"]
    assert part["type"] == "input_text"
    assert "M1,Design" in part["text"]


def test_client_errors_are_wrapped(stub_client) -> None:
    extractor = _extractor(client=stub_client(error=TimeoutError("slow")))

    with pytest.raises(RemoteExtractionError, match="slow"):
        extractor.extract(b"%PDF", "application/pdf", "scope.pdf", DocumentFormat.PDF)


def test_empty_reply_is_an_error(stub_client) -> None:
    client = stub_client()
    client.responses.handler = lambda _kwargs: SimpleNamespace(output_text="")

    with pytest.raises(RemoteExtractionError, match="no text output"):
        _extractor(client=client).extract(b"%PDF", "application/pdf", "scope.pdf", DocumentFormat.PDF)


def test_missing_api_key_is_an_error(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    with pytest.raises(RemoteExtractionError, match="API key unavailable"):
        _extractor().extract(b"%PDF", "application/pdf", "scope.pdf", DocumentFormat.PDF)


def test_reply_without_output_text_is_an_error(stub_client) -> None:
    client = stub_client()
    client.responses.handler = lambda _kwargs: SimpleNamespace(choices=[{"message": {"content": "{}"}}])

    with pytest.raises(RemoteExtractionError, match="no text output"):
        _extractor(client=client).extract(b"%PDF", "application/pdf", "scope.pdf", DocumentFormat.PDF)
