"""Shared LLM utility functions for fence-stripping and JSON extraction.

This module provides:
- strip_json_fences: Remove the markdown fence pair wrapping LLM output
- find_json_object: Locate the first brace-balanced {...} span in free text
- extract_json: Recover a JSON object from arbitrary model output

Every caller that reads structured model output (the intent classifier and all
generation agents) goes through extract_json.
"""

import json
import re
from typing import Any

import structlog

from galuxium.core.exceptions import InvalidJson, NoJsonFound

logger = structlog.get_logger(__name__)

# Only a fence that opens or closes the whole text counts; backticks inside
# JSON string values are content.
_OPEN_FENCE_RE = re.compile(r"\A```[ \t]*[A-Za-z0-9_+-]*[ \t]*(?:\n|\Z)")
_CLOSE_FENCE_RE = re.compile(r"\n?[ \t]*```\Z")


def strip_json_fences(content: str) -> str:
    """Remove a leading ```lang fence and a trailing ``` fence, if present."""
    text = content.strip()
    if not text.startswith("```"):
        return text
    text = _OPEN_FENCE_RE.sub("", text, count=1)
    return _CLOSE_FENCE_RE.sub("", text, count=1).strip()


def find_json_object(text: str) -> str | None:
    """Return the first brace-balanced {...} span, or None if no '{' closes.

    Braces inside JSON string literals are skipped so values like
    "use {name}" don't break the balance count.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]
        # Unbalanced from this '{': try the next one
        start = text.find("{", start + 1)
    return None


def _loads_object(text: str, raw: str) -> dict | None:
    """Parse text as a whole; None if it is not valid JSON at all."""
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(parsed, dict):
        raise InvalidJson("Model output JSON is not an object", raw=raw)
    return parsed


def extract_json(raw: Any) -> dict:
    """Recover a JSON object from model output.

    Steps: pass dicts through unchanged; parse the untouched text; parse it
    again with a wrapping code fence removed; fall back to the first
    brace-balanced span. Valid JSON always parses in the first step, so string
    values containing fences or braces come back unchanged.

    Args:
        raw: Model output (usually a string; an already-parsed dict is returned as-is)

    Returns:
        The parsed JSON object

    Raises:
        NoJsonFound: No '{' ... '}' span exists in the text
        InvalidJson: A span exists but is malformed or is not a JSON object
    """
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        raise InvalidJson(f"Expected model text, got {type(raw).__name__}", raw=repr(raw))

    parsed = _loads_object(raw.strip(), raw)
    if parsed is not None:
        return parsed

    text = strip_json_fences(raw)
    parsed = _loads_object(text, raw)
    if parsed is not None:
        return parsed

    span = find_json_object(text)
    if span is None:
        if "{" in text:
            # An opening brace with no balanced close: truncated or broken JSON
            raise InvalidJson("Unterminated JSON object in model output", raw=raw)
        raise NoJsonFound("No JSON object detected in model output", raw=raw)

    try:
        parsed = json.loads(span)
    except json.JSONDecodeError as e:
        logger.debug("json_span_parse_failed", error=str(e), span_length=len(span))
        raise InvalidJson(f"Malformed JSON in model output: {e.msg}", raw=raw) from e

    if not isinstance(parsed, dict):
        raise InvalidJson("Model output JSON is not an object", raw=raw)
    return parsed
