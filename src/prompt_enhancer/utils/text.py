"""Helpers for cleaning up model output and comparing prompt texts."""

from __future__ import annotations

import re

PREAMBLE_RE = re.compile(
    r"^\s*(?:here(?:'s| is) (?:the |an |your )?)?(?:improved|enhanced|refined|rewritten|final)"
    r"(?: version of the)? prompt\s*[:\-]\s*",
    re.IGNORECASE,
)
_WS_RE = re.compile(r"\s+")


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapping the whole text."""
    lines = text.strip().split("\n")

    # Remove opening fence (```text, ```, etc.)
    if lines and lines[0].strip().startswith("```"):
        lines = lines[1:]
        # Remove closing fence
        while lines and lines[-1].strip() in ("```", ""):
            lines = lines[:-1]

    return "\n".join(lines).strip()


def strip_preamble(text: str) -> str:
    """Drop a leading "Enhanced prompt:" style label."""
    return PREAMBLE_RE.sub("", text, count=1).strip()


def clean_output(text: str) -> str:
    """Normalize provider output into the bare prompt text."""
    text = strip_code_fences(text or "")
    text = strip_preamble(text)
    text = strip_code_fences(text)
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'" and text.count(text[0]) == 2:
        text = text[1:-1].strip()
    return text


def collapse(text: str) -> str:
    """Case-folded, whitespace-collapsed form used for identity comparisons."""
    return _WS_RE.sub(" ", text).strip().casefold()


def word_count(text: str) -> int:
    return len(text.split())
