"""
Best-effort JSON object extraction from free-form LLM output.

Models asked for "ONLY valid JSON" still wrap it in prose or Markdown
fences, or stop mid-object. ``extract_json_object`` recovers the first
parseable object or raises ``MalformedIntentError``.
"""
from __future__ import annotations

import json
import re
from collections.abc import Iterator
from typing import Any

from ..errors import MalformedIntentError

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def _balanced_objects(text: str) -> Iterator[str]:
    """Yield every balanced ``{...}`` span, scanning from each opening brace in turn."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for idx in range(start, len(text)):
            ch = text[idx]
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
                    yield text[start : idx + 1]
                    break
        start = text.find("{", start + 1)


def _loads_object(candidate: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(candidate)
    except (json.JSONDecodeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_json_object(raw: str | None) -> dict[str, Any]:
    """Return the first JSON object found in ``raw`` or raise ``MalformedIntentError``."""
    if not raw or not isinstance(raw, str) or not raw.strip():
        raise MalformedIntentError("Completion output is empty")

    text = raw.strip()
    parsed = _loads_object(text)
    if parsed is not None:
        return parsed

    for block in _FENCE_RE.findall(text):
        parsed = _loads_object(block.strip())
        if parsed is not None:
            return parsed

    for candidate in _balanced_objects(text):
        parsed = _loads_object(candidate)
        if parsed is not None:
            return parsed

    raise MalformedIntentError(f"No JSON object in completion output: {raw[:200]!r}")

