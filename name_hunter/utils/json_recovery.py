"""Best-effort JSON recovery for LLM responses.

Contract:
  1. Strict parse of the fence-stripped text.
  2. Parse of the outermost ``[...]`` / ``{...}`` span found in the text.
  3. If the span looks truncated, exactly one bracket-closing repair: cut after
     the last complete ``}`` and close every bracket still open.
  4. Anything else yields the empty result. A partial parse is never returned
     from a half-repaired string.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from name_hunter.infra.llm_client import LLMParseError

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)

# Keys under which providers like to wrap the array we asked for
_LIST_KEYS = ("candidates", "entities", "results", "items", "data", "terms")


def _strip_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


def _outermost_span(text: str) -> str:
    """Slice from the first opening bracket to its matching-kind last closer."""
    first_brace = text.find("{")
    first_bracket = text.find("[")
    if first_brace == -1 and first_bracket == -1:
        return text
    if first_bracket == -1 or (first_brace != -1 and first_brace < first_bracket):
        start, end = first_brace, text.rfind("}")
    else:
        start, end = first_bracket, text.rfind("]")
    if end > start:
        return text[start:end + 1]
    # No closer at all: hand back from the opener so repair can try
    return text[start:]


def _open_brackets(text: str) -> list[str]:
    """Return the stack of unclosed '{' / '[' outside string literals."""
    stack: list[str] = []
    in_string = False
    escape = False
    for ch in text:
        if escape:
            escape = False
            continue
        if ch == "\\" and in_string:
            escape = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch in ("{", "["):
            stack.append(ch)
        elif ch == "}" and stack and stack[-1] == "{":
            stack.pop()
        elif ch == "]" and stack and stack[-1] == "[":
            stack.pop()
    return stack


def repair_truncated_json(text: str) -> str | None:
    """Close a JSON array/object cut off mid-stream.

    Returns the repaired string, or None when there is nothing safe to keep.
    """
    text = text.strip()
    if not text or text[0] not in "[{":
        return None
    last_obj = text.rfind("}")
    if last_obj == -1:
        return None
    head = text[:last_obj + 1]
    closers = "".join("]" if b == "[" else "}" for b in reversed(_open_brackets(head)))
    return head + closers


def extract_json(text: str) -> Any:
    """Parse an LLM response into a JSON value, raising LLMParseError on failure."""
    if not text or not text.strip():
        raise LLMParseError("Empty LLM response")

    cleaned = _strip_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    span = _outermost_span(cleaned)
    try:
        return json.loads(span)
    except json.JSONDecodeError:
        pass

    repaired = repair_truncated_json(span)
    if repaired is not None:
        try:
            value = json.loads(repaired)
            logger.info("Recovered truncated JSON (%d -> %d chars)", len(span), len(repaired))
            return value
        except json.JSONDecodeError:
            pass

    raise LLMParseError(f"Failed to extract JSON from LLM response: {text[:200]}...")


def parse_json_list(text: str) -> list[dict]:
    """Return the list of objects in an LLM response, or [] if none can be recovered.

    Accepts a bare array or an object wrapping one under a common key.
    Non-object items are dropped.
    """
    try:
        value = extract_json(text)
    except LLMParseError:
        logger.warning("Unparseable LLM response (%d chars)", len(text or ""))
        return []

    if isinstance(value, dict):
        for key in _LIST_KEYS:
            if isinstance(value.get(key), list):
                value = value[key]
                break
        else:
            return []

    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]
