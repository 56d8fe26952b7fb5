"""Utilities for robustly extracting JSON from LLM responses."""

from __future__ import annotations
import json
import re
from typing import Any

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_FENCE = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\n?")


def _strip_code_fences(text: str) -> str:
    """Drop every ``` fence marker (with or without a language tag), wherever it sits."""
    return _FENCE.sub("", text).strip()


def extract_json(text: str) -> Any:
    """
    Parse the JSON object in an LLM response.
    - Handles code fences and leading/trailing prose.
    - Returns the parsed value, or None when nothing parses.
    """
    if not text or not text.strip():
        return None
    t = _strip_code_fences(text)

    try:
        return json.loads(t)
    except json.JSONDecodeError:
        pass

    m = _JSON_OBJECT.search(t)
    if not m:
        return None
    try:
        return json.loads(m.group(0))
    except json.JSONDecodeError:
        return None


def require_object(text: str, err: str = "Expected a JSON object.") -> dict:
    """Strict: must return an object, else raise ValueError."""
    data = extract_json(text)
    if not isinstance(data, dict):
        raise ValueError(err)
    return data
