"""Search and highlight over text that already carries terminal styling.

Escape sequences have no visible width, so a query must be matched against
the visible characters only and the hits mapped back to offsets in the styled
string. Highlight toggles are then spliced in between characters, never inside
an existing sequence, which keeps the original styling byte-for-byte intact.
"""

from __future__ import annotations

import re

# CSI (colours, cursor) and OSC (hyperlinks, titles) sequences.
ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;:?]*[ -/]*[@-~]|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")

HIGHLIGHT_START = "\x1b[7m"
HIGHLIGHT_END = "\x1b[27m"


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def visible_index(styled: str) -> tuple[str, list[int]]:
    """Return the visible text of *styled* and, per visible char, its offset in *styled*."""
    visible: list[str] = []
    offsets: list[int] = []
    i = 0
    n = len(styled)
    while i < n:
        if styled[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(styled, i)
            if match:
                i = match.end()
                continue
        visible.append(styled[i])
        offsets.append(i)
        i += 1
    return "".join(visible), offsets


def _folded_index(visible: str, offsets: list[int]) -> tuple[str, list[int]]:
    # Lowercasing can change length ("İ" -> "i̇"); fold per char to keep the table aligned.
    folded: list[str] = []
    table: list[int] = []
    for ch, offset in zip(visible, offsets):
        low = ch.lower()
        folded.append(low)
        table.extend([offset] * len(low))
    return "".join(folded), table


def find_matches(styled: str, query: str) -> list[tuple[int, int]]:
    """Find case-insensitive, non-overlapping hits of *query* in the visible text.

    Each hit is returned as ``(start, end)`` offsets into *styled*, where
    ``start`` is the first matched char and ``end`` is one past the last.
    """
    if not query:
        return []
    visible, offsets = visible_index(styled)
    folded, table = _folded_index(visible, offsets)
    needle = query.lower()

    hits: list[tuple[int, int]] = []
    pos = folded.find(needle)
    while pos != -1:
        last = pos + len(needle) - 1
        hits.append((table[pos], table[last] + 1))
        pos = folded.find(needle, pos + len(needle))
    return hits


def highlight_matches(styled: str, query: str) -> str:
    hits = find_matches(styled, query)
    if not hits:
        return styled

    out: list[str] = []
    cursor = 0
    for start, end in hits:
        out.append(styled[cursor:start])
        out.append(HIGHLIGHT_START)
        out.append(styled[start:end])
        out.append(HIGHLIGHT_END)
        cursor = end
    out.append(styled[cursor:])
    return "".join(out)


def strip_highlights(text: str) -> str:
    return text.replace(HIGHLIGHT_START, "").replace(HIGHLIGHT_END, "")


def count_lines(text: str) -> int:
    if not text:
        return 0
    return len(text.split("\n"))
