"""Pull a JSON value out of a model reply."""

from __future__ import annotations

import json


def extract_json(text: str) -> dict | list:
    """Parse JSON from an LLM reply.

    Accepts a bare JSON document, one wrapped in a ```json fence, or an
    object/array embedded in surrounding prose.
    """
    text = (text or "").strip()
    if not text:
        raise ValueError("Could not extract JSON from empty response")

    for candidate in (text, _strip_code_fences(text)):
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            pass

    for opener, closer in (("{", "}"), ("[", "]")):
        start = text.find(opener)
        end = text.rfind(closer)
        if start != -1 and end > start:
            try:
                return json.loads(text[start : end + 1])
            except json.JSONDecodeError:
                continue

    raise ValueError(f"Could not extract JSON from text: {text[:200]}...")


def _strip_code_fences(text: str) -> str:
    lines = text.split("\n")
    # drop leading prose up to the opening fence
    for i, line in enumerate(lines):
        if line.strip().startswith("```"):
            lines = lines[i + 1 :]
            break
    for i, line in enumerate(lines):
        if line.strip().startswith("```"):
            lines = lines[:i]
            break
    return "\n".join(lines).strip()
