"""Scrollable preview of rendered Markdown plus in-document search.

The viewport keeps the raw source and its rendered form side by side. Search
hits are located on raw lines (for navigation) and highlighted in the rendered
text (for display). Rendering may add or drop lines, so jumping to a hit uses a
linear estimate of where the raw line landed in the rendered output.
"""

from __future__ import annotations

import logging
import math

from result import Err

from skim.services.ansi import count_lines, highlight_matches
from skim.services.markdown import MarkdownRenderer

logger = logging.getLogger(__name__)

WRAP_PADDING = 4

WELCOME_MARKDOWN = """\
# Welcome to skim

Select a markdown file from the left panel to preview it here.

## Quick Start

- Use **j/k** or **arrow keys** to navigate
- Press **Enter** to open a file
- Press **Tab** to switch panels
- Press **/** to filter files or search the preview
- Press **?** for help, **q** to quit
"""

_ERROR_STYLE = "\x1b[38;2;255;107;107m"
_RESET = "\x1b[0m"


class Viewport:
    def __init__(self, renderer: MarkdownRenderer | None = None, width: int = 80, height: int = 20) -> None:
        self._renderer = renderer or MarkdownRenderer(max(1, width - WRAP_PADDING))
        self.width = width
        self.height = max(1, height)

        self.file_path: str | None = None
        self.raw_content = ""
        self.styled_content = ""
        self.error: str | None = None
        self._content = ""
        self._lines: list[str] = [""]
        self.scroll_offset = 0

        self.search_query = ""
        self.match_lines: list[int] = []
        self.current_match = 0
        self.search_input = ""
        self._search_input_active = False

    # -- content ---------------------------------------------------------

    def set_size(self, width: int, height: int) -> None:
        self.width = max(1, width)
        self.height = max(1, height)
        self._renderer.set_width(max(1, self.width - WRAP_PADDING))
        if self.raw_content and self.error is None:
            self._render_raw()
            self._apply_highlight()
        self._clamp()

    def set_content(self, raw: str, path: str | None) -> None:
        """Load new source text, render it, reset scroll and drop any search."""
        self.file_path = path
        self.raw_content = raw
        self.error = None
        self._render_raw()
        self._reset_search()
        self.scroll_offset = 0

    def show_welcome(self) -> None:
        self.set_content(WELCOME_MARKDOWN, None)

    def set_error(self, path: str | None, message: str) -> None:
        self.file_path = path
        self.raw_content = ""
        self.error = message
        self.styled_content = f"\n  {_ERROR_STYLE}Error loading file:{_RESET}\n\n  {_ERROR_STYLE}{message}{_RESET}"
        self._reset_search()
        self.scroll_offset = 0

    def _render_raw(self) -> None:
        result = self._renderer.render(self.raw_content)
        if isinstance(result, Err):
            logger.warning("Render failed for %s: %s", self.file_path, result.unwrap_err())
            self.set_error(self.file_path, result.unwrap_err())
            return
        self.styled_content = result.unwrap()

    def _set_display(self, content: str) -> None:
        self._content = content
        self._lines = content.split("\n")
        self._clamp()

    @property
    def content(self) -> str:
        return self._content

    @property
    def total_lines(self) -> int:
        return len(self._lines)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    # -- scrolling -------------------------------------------------------

    @property
    def max_offset(self) -> int:
        return max(0, self.total_lines - self.height)

    def _clamp(self) -> None:
        self.scroll_offset = max(0, min(self.scroll_offset, self.max_offset))

    def scroll_to(self, offset: int) -> None:
        self.scroll_offset = offset
        self._clamp()

    def line_up(self, n: int = 1) -> None:
        self.scroll_to(self.scroll_offset - n)

    def line_down(self, n: int = 1) -> None:
        self.scroll_to(self.scroll_offset + n)

    def half_page_up(self) -> None:
        self.line_up(max(1, self.height // 2))

    def half_page_down(self) -> None:
        self.line_down(max(1, self.height // 2))

    def goto_top(self) -> None:
        self.scroll_to(0)

    def goto_bottom(self) -> None:
        self.scroll_to(self.max_offset)

    @property
    def at_top(self) -> bool:
        return self.scroll_offset == 0

    @property
    def at_bottom(self) -> bool:
        return self.scroll_offset >= self.max_offset

    @property
    def scroll_percent(self) -> float:
        if self.max_offset == 0:
            return 1.0
        return self.scroll_offset / self.max_offset

    def visible_lines(self) -> list[str]:
        return self._lines[self.scroll_offset : self.scroll_offset + self.height]

    # -- search ----------------------------------------------------------

    @property
    def is_search_input(self) -> bool:
        return self._search_input_active

    @property
    def has_active_search(self) -> bool:
        return bool(self.search_query) and bool(self.match_lines)

    @property
    def match_count(self) -> int:
        return len(self.match_lines)

    @property
    def current_match_index(self) -> int | None:
        return self.current_match if self.match_lines else None

    def begin_search_input(self) -> None:
        self._search_input_active = True
        self.search_input = ""

    def search_input_append(self, text: str) -> None:
        if self._search_input_active:
            self.search_input += text

    def search_input_backspace(self) -> None:
        if self._search_input_active:
            self.search_input = self.search_input[:-1]

    def commit_search_input(self) -> None:
        self._search_input_active = False
        query = self.search_input
        if query:
            self.search(query)
        else:
            self.clear_search()

    def cancel_search_input(self) -> None:
        self._search_input_active = False
        self.search_input = self.search_query

    def search(self, query: str) -> None:
        self.search_query = query
        needle = query.lower()
        self.match_lines = [i for i, line in enumerate(self.raw_content.split("\n")) if needle in line.lower()]
        self.current_match = 0
        self._apply_highlight()
        if self.match_lines:
            self._scroll_to_current_match()

    def clear_search(self) -> None:
        self.search_query = ""
        self.match_lines = []
        self.current_match = 0
        self._set_display(self.styled_content)

    def _reset_search(self) -> None:
        self._search_input_active = False
        self.search_input = ""
        self.clear_search()

    def _apply_highlight(self) -> None:
        if self.search_query:
            self._set_display(highlight_matches(self.styled_content, self.search_query))
        else:
            self._set_display(self.styled_content)

    def next_match(self) -> None:
        if not self.match_lines:
            return
        self.current_match = (self.current_match + 1) % len(self.match_lines)
        self._scroll_to_current_match()

    def previous_match(self) -> None:
        if not self.match_lines:
            return
        self.current_match = (self.current_match - 1) % len(self.match_lines)
        self._scroll_to_current_match()

    def estimated_rendered_line(self, raw_line: int) -> int:
        total_raw = count_lines(self.raw_content)
        if total_raw == 0:
            return 0
        return math.floor(raw_line / total_raw * self.total_lines + 0.5)

    def _scroll_to_current_match(self) -> None:
        target = self.estimated_rendered_line(self.match_lines[self.current_match])
        self.scroll_to(max(0, target - self.height // 2))
