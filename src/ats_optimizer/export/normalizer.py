"""Convert section markup into plain lines for every export format.

Section bodies use a small HTML-like dialect: ``<b>``/``<strong>`` spans,
``<ul>``/``<ol>`` with ``<li>`` items, ``<br>`` and block wrappers such as
``<div>`` or ``<p>``. This module scans tags with a regex instead of a DOM
parser so the result does not depend on any rendering engine.
"""

from __future__ import annotations

import html
import re

BULLET = "•"

_TAG_RE = re.compile(r"<(/?)([a-zA-Z][a-zA-Z0-9]*)(?:\s[^<>]*)?/?\s*>")
_SPACE_RE = re.compile(r"[ \t\f\v\r\u00a0]+")

_BLOCK_TAGS = frozenset(
    {"div", "p", "ul", "ol", "section", "table", "tr", "h1", "h2", "h3", "h4", "h5", "h6"}
)
_LIST_ITEM_MARK = "\x00"


def _tag_replacement(closing: bool, name: str) -> str:
    name = name.lower()
    if name == "br":
        return "\n"
    if name == "li":
        return "\n" if closing else f"\n{_LIST_ITEM_MARK}"
    if name in _BLOCK_TAGS:
        return "\n"
    # inline or unknown tag: keep the inner text only
    return ""


def _clean_line(line: str) -> str:
    bullet = line.lstrip().startswith(_LIST_ITEM_MARK)
    text = _SPACE_RE.sub(" ", line.replace(_LIST_ITEM_MARK, "")).strip()
    if not text:
        return ""
    return f"{BULLET} {text}" if bullet else text


def normalize(markup: str | None) -> list[str]:
    """Return the non-empty plain lines of ``markup``.

    List items are prefixed with a bullet glyph. Anything that is not a
    well-formed tag is kept as literal text.
    """
    if not markup:
        return []
    markup = markup.replace(_LIST_ITEM_MARK, "")

    pieces: list[str] = []
    pos = 0
    for match in _TAG_RE.finditer(markup):
        pieces.append(html.unescape(markup[pos : match.start()]))
        pieces.append(_tag_replacement(match.group(1) == "/", match.group(2)))
        pos = match.end()
    pieces.append(html.unescape(markup[pos:]))

    lines = (_clean_line(line) for line in "".join(pieces).split("\n"))
    return [line for line in lines if line]


def normalize_text(markup: str | None) -> str:
    """Plain-text form of ``markup``, one normalized line per row."""
    return "\n".join(normalize(markup))
