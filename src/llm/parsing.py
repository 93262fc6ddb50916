"""Helpers for pulling structured answers out of model output."""

from __future__ import annotations


def strip_code_fences(content: str) -> str:
    """Remove a leading ```lang line and a trailing ``` marker, then trim."""
    content = content.strip()

    if content.startswith("```"):
        first_newline = content.find("\n")
        if first_newline != -1:
            content = content[first_newline + 1 :]
        else:
            content = content[3:]

        if content.rstrip().endswith("```"):
            content = content.rstrip()[:-3]

        content = content.strip()
    elif content.endswith("```"):
        content = content[:-3].strip()

    return content


def _extract_balanced(text: str, open_char: str, close_char: str) -> str | None:
    start = text.find(open_char)
    if start == -1:
        return None

    depth = 0
    for idx in range(start, len(text)):
        ch = text[idx]
        if ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1
            if depth == 0:
                return text[start : idx + 1].strip()
    return None


def extract_json_block(content: str) -> str:
    """Extract the JSON payload from a model response.

    Handles code fences and models that prepend commentary before the
    first JSON object or array. Returns the input (fence-stripped) when no
    JSON-looking block is found so the caller's parser reports the error.
    """
    content = strip_code_fences(content)

    if content.startswith("{") or content.startswith("["):
        return content

    extracted = _extract_balanced(content, "{", "}")
    if extracted is not None:
        return extracted

    extracted = _extract_balanced(content, "[", "]")
    if extracted is not None:
        return extracted

    return content
