"""Utility to extract JSON from LLM responses."""

from __future__ import annotations

import json
from typing import Any

from portfolio_ai.errors import MalformedResponseError


def extract_json(text: str) -> Any:
    """Extract JSON from an LLM response, handling ```json blocks.

    Tries in order:
    1. Direct json.loads on the full text
    2. Strip fenced code block markers and parse
    3. Find first '{' to last '}' and parse
    4. Find first '[' to last ']' and parse (JSON array)

    Raises MalformedResponseError (with the raw text attached) if none work.
    """
    if not isinstance(text, str):
        raise MalformedResponseError(
            f"Expected text from the model, got {type(text).__name__}", raw=repr(text)
        )
    raw = text
    text = text.strip()

    # 1) Direct parse
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # 2) Strip fenced code block markers
    stripped = strip_code_fences(text)
    if stripped != text:
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            pass

    # 3) First '{' to last '}', then 4) first '[' to last ']'
    for opening, closing in (("{", "}"), ("[", "]")):
        for candidate in (stripped, text):
            result = _extract_between(candidate, opening, closing)
            if result is not None:
                return result

    preview = raw.strip()[:200]
    raise MalformedResponseError(f"Could not extract JSON from model response: {preview}", raw=raw)


def extract_json_object(text: str) -> dict[str, Any]:
    """Like extract_json, but the top level must be an object."""
    data = extract_json(text)
    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Expected a JSON object from the model, got {type(data).__name__}", raw=text
        )
    return data


def strip_code_fences(text: str) -> str:
    """Remove markdown code fence markers (```json ... ```) around a body."""
    lines = text.strip().split("\n")

    # Drop any preamble before the opening fence
    for i, line in enumerate(lines):
        if line.strip().startswith("```"):
            lines = lines[i + 1 :]
            break
    else:
        return text.strip()

    # Drop the closing fence and anything after it
    for i, line in enumerate(lines):
        if line.strip() == "```":
            lines = lines[:i]
            break

    return "\n".join(lines).strip()


def _extract_between(text: str, opening: str, closing: str) -> Any | None:
    start = text.find(opening)
    end = text.rfind(closing)
    if start != -1 and end != -1 and end > start:
        try:
            return json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            pass
    return None
