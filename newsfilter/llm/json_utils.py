"""JSON parsing helpers for model output.

JSON mode normally yields a bare object, but fenced or chatty output
still shows up and is handled here.
"""

import json
import re
from typing import Any


def _reject_constant(token: str) -> Any:
    msg = f"Non-standard JSON constant: {token}"
    raise ValueError(msg)


def fix_escape_sequences(text: str) -> str:
    """Double lone backslashes that do not form a valid JSON escape.

    Args:
        text: Raw text potentially containing invalid escapes.

    Returns:
        Text with invalid escape sequences fixed.
    """
    return re.sub(r'(?<!\\)\\(?!["\\/bfnrtu])', r"\\\\", text)


def strip_markdown_fences(text: str) -> str:
    """Strip markdown code fences from model output.

    Args:
        text: Raw text potentially wrapped in code fences.

    Returns:
        Text with code fences removed.
    """
    text = text.strip()
    if text.startswith("```"):
        first_newline = text.find("\n")
        if first_newline != -1:
            text = text[first_newline + 1 :]
        if text.endswith("```"):
            text = text[: -len("```")]
        text = text.strip()
    return text


def extract_first_json_object(text: str) -> str | None:
    """Extract the first balanced ``{...}`` block from text.

    Braces inside string literals are not tracked; model output for a
    two-field object rarely contains them.

    Args:
        text: Raw text potentially containing a JSON object.

    Returns:
        Extracted object string, or None if no balanced block exists.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    for i in range(start, len(text)):
        if text[i] == "{":
            depth += 1
        elif text[i] == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def parse_json_object(text: str) -> dict[str, Any] | None:
    """Parse model output into a JSON object.

    Tries the fence-stripped text, then the first ``{...}`` block, each
    with and without escape repair.

    Args:
        text: Raw model output.

    Returns:
        The parsed object, or None if nothing parses to an object.
    """
    stripped = strip_markdown_fences(text)
    candidates = [stripped]
    extracted = extract_first_json_object(stripped)
    if extracted and extracted != stripped:
        candidates.append(extracted)

    for candidate in candidates:
        for attempt in (candidate, fix_escape_sequences(candidate)):
            try:
                parsed = json.loads(attempt, parse_constant=_reject_constant)
            except ValueError:
                continue
            if isinstance(parsed, dict):
                return parsed
    return None
