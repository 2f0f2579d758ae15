from __future__ import annotations

from result import Err, Ok, Result

from skim.services.ansi import HIGHLIGHT_START, strip_highlights
from skim.services.viewport import Viewport


class _PlainRenderer:
    """Passes the source through untouched so line numbers stay predictable."""

    def __init__(self) -> None:
        self.widths: list[int] = []
        self.fail = False

    def set_width(self, width: int) -> None:
        self.widths.append(width)

    def render(self, text: str, width: int | None = None) -> Result[str, str]:
        if self.fail:
            return Err("boom")
        return Ok(text)


def _viewport(height: int = 5) -> Viewport:
    return Viewport(renderer=_PlainRenderer(), width=40, height=height)  # type: ignore[arg-type]


def test_search_records_raw_line_numbers() -> None:
    vp = _viewport()
    vp.set_content("hi\nhello world\nhello again", "/docs/a.md")

    vp.search("hello")

    assert vp.match_lines == [1, 2]
    assert vp.current_match == 0
    vp.previous_match()
    assert vp.current_match == 1


def test_next_match_cycles_back_to_start() -> None:
    vp = _viewport()
    vp.set_content("x\n".join(["hello"] * 7), "/docs/a.md")
    vp.search("HELLO")
    vp.next_match()
    start = vp.current_match

    for _ in range(vp.match_count):
        vp.next_match()

    assert vp.current_match == start


def test_search_highlights_display_without_touching_styled_content() -> None:
    vp = _viewport()
    vp.set_content("one\nHello there\nthree", "/docs/a.md")

    vp.search("hello")

    assert HIGHLIGHT_START in vp.content
    assert strip_highlights(vp.content) == vp.styled_content
    assert HIGHLIGHT_START not in vp.styled_content


def test_loading_new_content_clears_search() -> None:
    vp = _viewport()
    vp.set_content("hello", "/docs/a.md")
    vp.search("hello")

    vp.set_content("other hello", "/docs/b.md")

    assert vp.search_query == ""
    assert vp.match_lines == []
    assert vp.current_match_index is None
    assert HIGHLIGHT_START not in vp.content
    assert vp.scroll_offset == 0


def test_search_input_does_not_touch_matches_until_commit() -> None:
    vp = _viewport()
    vp.set_content("hello\nworld", "/docs/a.md")
    vp.search("hello")

    vp.begin_search_input()
    for ch in "world":
        vp.search_input_append(ch)
    assert vp.is_search_input
    assert vp.match_lines == [0]

    vp.cancel_search_input()
    assert not vp.is_search_input
    assert vp.search_query == "hello"
    assert vp.match_lines == [0]

    vp.begin_search_input()
    for ch in "wor":
        vp.search_input_append(ch)
    vp.search_input_backspace()
    vp.commit_search_input()
    assert vp.search_query == "wo"
    assert vp.match_lines == [1]


def test_committing_empty_input_clears_search() -> None:
    vp = _viewport()
    vp.set_content("hello", "/docs/a.md")
    vp.search("hello")

    vp.begin_search_input()
    vp.commit_search_input()

    assert not vp.has_active_search
    assert vp.content == vp.styled_content


def test_search_without_hits_is_not_active() -> None:
    vp = _viewport()
    vp.set_content("hello", "/docs/a.md")

    vp.search("absent")

    assert vp.search_query == "absent"
    assert not vp.has_active_search
    vp.next_match()
    assert vp.current_match == 0


def test_scroll_offset_stays_in_bounds() -> None:
    vp = _viewport(height=4)
    vp.set_content("\n".join(str(i) for i in range(10)), "/docs/a.md")

    vp.line_up()
    assert vp.scroll_offset == 0
    assert vp.at_top
    vp.goto_bottom()
    assert vp.scroll_offset == 6
    assert vp.at_bottom
    vp.line_down(50)
    assert vp.scroll_offset == 6
    vp.half_page_up()
    assert vp.scroll_offset == 4
    assert vp.visible_lines() == ["4", "5", "6", "7"]


def test_match_navigation_scrolls_to_estimated_line() -> None:
    vp = _viewport(height=4)
    lines = [f"line {i}" for i in range(20)]
    lines[15] = "target"
    vp.set_content("\n".join(lines), "/docs/a.md")

    vp.search("target")

    assert vp.estimated_rendered_line(15) == 15
    assert vp.scroll_offset == 13


def test_short_content_cannot_scroll() -> None:
    vp = _viewport(height=10)
    vp.set_content("a\nb", "/docs/a.md")

    vp.line_down(3)

    assert vp.scroll_offset == 0
    assert vp.scroll_percent == 1.0


def test_render_failure_shows_error_panel() -> None:
    renderer = _PlainRenderer()
    renderer.fail = True
    vp = Viewport(renderer=renderer, width=40, height=5)  # type: ignore[arg-type]

    vp.set_content("# hi", "/docs/a.md")

    assert vp.is_error
    assert "Error loading file:" in vp.content
    assert "boom" in vp.content


def test_set_error_replaces_content() -> None:
    vp = _viewport()
    vp.set_content("hello", "/docs/a.md")
    vp.search("hello")

    vp.set_error("/docs/a.md", "permission denied")

    assert vp.is_error
    assert vp.raw_content == ""
    assert vp.match_lines == []
    assert "permission denied" in vp.content


def test_resize_sets_wrap_width() -> None:
    renderer = _PlainRenderer()
    vp = Viewport(renderer=renderer, width=40, height=5)  # type: ignore[arg-type]

    vp.set_size(100, 30)

    assert renderer.widths[-1] == 96
    assert vp.height == 30


def test_welcome_has_no_file() -> None:
    vp = _viewport()

    vp.show_welcome()

    assert vp.file_path is None
    assert "Welcome to skim" in vp.content
