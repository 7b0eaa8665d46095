"""Tolerant decoding of model output that is supposed to be a JSON object."""

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ParseOutcome:
    """Either a decoded JSON object or the reason decoding failed."""

    payload: dict[str, Any] | None = None
    error: str | None = None


def strip_code_fences(raw: str) -> str:
    """Remove a surrounding Markdown code fence (```json ... ``` or ``` ... ```)."""
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        newline = cleaned.find("\n")
        if newline == -1:
            cleaned = cleaned[3:].removeprefix("json")
        else:
            cleaned = cleaned[newline + 1 :]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_json_object(raw: str) -> ParseOutcome:
    """Decode raw model output into a dict. Never raises."""
    cleaned = strip_code_fences(raw)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        return ParseOutcome(error=f"Invalid JSON response: {exc}")
    if not isinstance(parsed, dict):
        return ParseOutcome(error="JSON response must be an object")
    return ParseOutcome(payload=parsed)
