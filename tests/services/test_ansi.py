from __future__ import annotations

from skim.services.ansi import (
    HIGHLIGHT_END,
    HIGHLIGHT_START,
    count_lines,
    find_matches,
    highlight_matches,
    strip_ansi,
    strip_highlights,
    visible_index,
)

BOLD = "\x1b[1m"
RESET = "\x1b[0m"
RED = "\x1b[38;2;255;0;0m"
LINK = "\x1b]8;;https://example.com\x1b\\"


def test_strip_ansi_removes_csi_and_osc() -> None:
    styled = f"{BOLD}Hello{RESET} {LINK}world{RESET}"

    assert strip_ansi(styled) == "Hello world"


def test_visible_index_maps_each_char_to_its_offset() -> None:
    styled = f"a{BOLD}b{RESET}c"

    visible, offsets = visible_index(styled)

    assert visible == "abc"
    assert [styled[i] for i in offsets] == ["a", "b", "c"]


def test_find_matches_ignores_style_sequences_inside_the_word() -> None:
    styled = f"say he{BOLD}llo{RESET} now"

    hits = find_matches(styled, "hello")

    assert len(hits) == 1
    start, end = hits[0]
    assert strip_ansi(styled[start:end]) == "hello"


def test_find_matches_is_case_insensitive_and_non_overlapping() -> None:
    styled = f"{RED}AAAA{RESET} Hello HELLO"

    assert len(find_matches(styled, "aa")) == 2
    assert len(find_matches(styled, "hello")) == 2
    assert find_matches(styled, "") == []


def test_highlight_markers_never_land_inside_sequences() -> None:
    styled = f"{RED}hello{RESET}"

    out = highlight_matches(styled, "hello")

    assert out == f"{RED}{HIGHLIGHT_START}hello{HIGHLIGHT_END}{RESET}"
    assert strip_ansi(out) == "hello"


def test_stripping_highlights_restores_styled_text() -> None:
    samples = [
        "plain text with hello in it",
        f"{BOLD}# Title{RESET}\n\n{RED}hello{RESET} there, Hello again",
        f"he{BOLD}ll{RESET}o {LINK}HELLO{RESET}\nhelloHELLOhello",
        "no match here",
    ]
    for styled in samples:
        for query in ("hello", "l", "o h", "xyz"):
            assert strip_highlights(highlight_matches(styled, query)) == styled


def test_unicode_case_folding_keeps_offsets_aligned() -> None:
    styled = f"İstanbul {BOLD}ok{RESET}"

    hits = find_matches(styled, "ok")

    assert len(hits) == 1
    start, end = hits[0]
    assert styled[start:end] == "ok"


def test_count_lines() -> None:
    assert count_lines("") == 0
    assert count_lines("one") == 1
    assert count_lines("a\nb\n") == 3
