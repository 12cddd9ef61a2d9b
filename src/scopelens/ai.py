"""LLM-backed milestone extraction.

The remote path sends the uploaded document to an OpenAI model and expects a
JSON reply in the same shape the heuristic engine produces.  Any failure is
reported as :class:`RemoteExtractionError` so callers can fall back to the
local heuristics.
"""
from __future__ import annotations

import base64
import json
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

import pandas as pd
from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match
from openai import OpenAI

from .config import AIConfig
from .decoders import read_grid
from .errors import RemoteExtractionError
from .fallback import DocumentFormat
from .models import Ballpark, MilestoneRecord

LOGGER = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are an experienced delivery manager reading project scope documents. "
    "Extract the milestone table exactly as written and reply with JSON only."
)

EXTRACTION_PROMPT = (
    "Extract project milestone data from the provided document ({file_name}).\n"
    "Return a JSON object with:\n"
    "- milestones: array of objects with milestone (string), title (string), scope (string), "
    "tasks (array of strings), exclusions (array of strings), estimatedHours (number), "
    "priceEstimate (number)\n"
    "- totalBallpark: optional object with hours (number) and price (number)\n\n"
    "Guidelines:\n"
    "1. 'milestone' is the exact text of the FIRST column of the milestone table "
    "(usually identifiers such as \"Milestone 1\" or \"M1\").\n"
    "2. 'title' is the exact text of the SECOND column (the name of that phase).\n"
    "3. 'scope' is the detailed description of the work.\n"
    "4. 'tasks' are the itemized tasks.\n"
    "5. 'exclusions' are items explicitly listed as out of scope.\n"
    "6. 'estimatedHours' and 'priceEstimate' are numbers only."
)

_NUMBER = {"type": "number"}
_STRINGS = {"type": "array", "items": {"type": "string"}}

RESPONSE_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["milestones"],
    "properties": {
        "milestones": {
            "type": "array",
            "items": {
                "type": "object",
                "required": [
                    "milestone",
                    "title",
                    "scope",
                    "tasks",
                    "exclusions",
                    "estimatedHours",
                    "priceEstimate",
                ],
                "properties": {
                    "milestone": {"type": "string"},
                    "title": {"type": "string"},
                    "scope": {"type": "string"},
                    "tasks": _STRINGS,
                    "exclusions": _STRINGS,
                    "estimatedHours": _NUMBER,
                    "priceEstimate": _NUMBER,
                },
            },
        },
        "totalBallpark": {
            "type": "object",
            "properties": {"hours": _NUMBER, "price": _NUMBER},
        },
    },
}

FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(?P<body>.*?)\s*```$", re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True)
class RemoteExtraction:
    milestones: List[MilestoneRecord]
    total_ballpark: Optional[Ballpark] = None


class RemoteExtractor:
    """Coordinates calls to the remote extraction model."""

    def __init__(self, config: AIConfig, client: object | None = None) -> None:
        self.config = config
        self._client = client
        self._validator = Draft7Validator(RESPONSE_SCHEMA)

    @property
    def available(self) -> bool:
        if not self.config.enabled:
            return False
        return self._client is not None or bool(self.config.resolve_api_key())

    def extract(
        self,
        data: bytes,
        mime_type: str,
        file_name: str,
        document_format: DocumentFormat,
    ) -> RemoteExtraction:
        client = self._client or self._build_client()
        content = self._build_content(data, mime_type, file_name, document_format)
        LOGGER.info("Requesting remote extraction of %s with %s", file_name, self.config.model)
        try:
            response = client.responses.create(  # type: ignore[attr-defined]
                model=self.config.model,
                input=[
                    {"role": "system", "content": self.config.system_prompt or DEFAULT_SYSTEM_PROMPT},
                    {"role": "user", "content": content},
                ],
                text={"format": {"type": "json_object"}},
                timeout=self.config.timeout_seconds,
            )
        except Exception as exc:
            raise RemoteExtractionError(f"Remote extraction failed for {file_name}: {exc}") from exc

        text = self._extract_response_text(response)
        if not text:
            raise RemoteExtractionError(f"Remote extraction for {file_name} returned no text output")
        return self.parse_payload(text)

    def parse_payload(self, text: str) -> RemoteExtraction:
        fenced = FENCE_PATTERN.match(text.strip())
        if fenced:
            text = fenced.group("body")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise RemoteExtractionError(f"Remote extraction returned invalid JSON: {exc}") from exc

        error = best_match(self._validator.iter_errors(payload))
        if error is not None:
            raise RemoteExtractionError(f"Remote extraction payload failed validation: {error.message}")

        milestones = [
            MilestoneRecord.from_dict({**item, "id": f"m-{index}"}, index)
            for index, item in enumerate(payload["milestones"])
        ]
        ballpark = payload.get("totalBallpark")
        total = Ballpark.from_dict(ballpark) if ballpark else None
        return RemoteExtraction(milestones=milestones, total_ballpark=total)

    def _build_client(self) -> OpenAI:
        api_key = self.config.resolve_api_key()
        if not api_key:
            raise RemoteExtractionError(
                f"AI extraction enabled but API key unavailable; expected at "
                f"{self.config.api_key_path} or via {self.config.api_key_env}"
            )
        try:
            return OpenAI(api_key=api_key)
        except Exception as exc:
            raise RemoteExtractionError(f"Failed to initialise OpenAI client: {exc}") from exc

    def _build_content(
        self,
        data: bytes,
        mime_type: str,
        file_name: str,
        document_format: DocumentFormat,
    ) -> List[dict]:
        prompt = EXTRACTION_PROMPT.format(file_name=file_name)
        if document_format is DocumentFormat.PDF:
            encoded = base64.b64encode(data).decode("ascii")
            return [
                {
                    "type": "input_file",
                    "filename": file_name,
                    "file_data": f"data:{mime_type or 'application/pdf'};base64,{encoded}",
                },
                {"type": "input_text", "text": prompt},
            ]

        sheet = pd.DataFrame(read_grid(data, file_name)).to_csv(index=False, header=False)
        if len(sheet) > self.config.max_context_chars:
            LOGGER.debug("Truncating worksheet text for %s to %d characters", file_name, self.config.max_context_chars)
            sheet = sheet[: self.config.max_context_chars]
        return [
            {"type": "input_text", "text": f"{prompt}\n\nFirst worksheet as CSV:\n---\n{sheet}\n---"},
        ]

    def _extract_response_text(self, response: object) -> Optional[str]:
        text = getattr(response, "output_text", None)
        if not isinstance(text, str):
            return None
        return text.strip() or None


__all__ = ["RemoteExtractor", "RemoteExtraction", "RESPONSE_SCHEMA"]
