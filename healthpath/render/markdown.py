"""
Markdown subset used by AI analysis text.

Supported, in order of precedence:
  ***text***   highlighted callout block
  **text**     bold
  - item       list item (consecutive items share one <ul>)
  1. text      numbered block with the number emphasized
Every other line boundary becomes <br />.
"""
from __future__ import annotations

import html
import re
from typing import List


CALLOUT_RE = re.compile(r"\*\*\*(.*?)\*\*\*")
BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
LIST_ITEM_RE = re.compile(r"^\s*-\s(.*)$")
NUMBERED_RE = re.compile(r"^\s*(\d+)\.\s+(.*)$")

CALLOUT_HTML = '<div class="callout"><strong>{}</strong></div>'


def _inline(line: str) -> str:
    line = CALLOUT_RE.sub(lambda m: CALLOUT_HTML.format(m.group(1)), line)
    return BOLD_RE.sub(r"<strong>\1</strong>", line)


def render(text: str, escape: bool = False) -> str:
    if not text:
        return ""
    if escape:
        text = html.escape(text, quote=False)

    parts: List[tuple[str, bool]] = []  # (fragment, is_block)
    items: List[str] = []

    def flush_list() -> None:
        if items:
            parts.append(("<ul>" + "".join(items) + "</ul>", True))
            items.clear()

    for raw in text.replace("\r\n", "\n").split("\n"):
        m = LIST_ITEM_RE.match(raw)
        if m:
            items.append(f"<li>{_inline(m.group(1))}</li>")
            continue
        flush_list()

        m = NUMBERED_RE.match(raw)
        if m:
            parts.append(
                (f'<div class="numbered"><strong>{m.group(1)}.</strong> {_inline(m.group(2))}</div>', True)
            )
            continue

        line = _inline(raw)
        parts.append((line, line.startswith('<div class="callout">') and line.endswith("</div>")))
    flush_list()

    out: List[str] = []
    prev_block = True
    for i, (fragment, is_block) in enumerate(parts):
        if i > 0 and not prev_block and not is_block:
            out.append("<br />")
        out.append(fragment)
        prev_block = is_block
    return "".join(out)
