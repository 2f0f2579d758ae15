from __future__ import annotations

import io

from result import Err, Ok, Result
from rich.console import Console
from rich.markdown import Markdown

MIN_WRAP_WIDTH = 20


class MarkdownRenderer:
    """Render Markdown source to ANSI-styled text at a fixed wrap width."""

    def __init__(self, width: int = 80, code_theme: str = "monokai") -> None:
        self._width = max(MIN_WRAP_WIDTH, width)
        self._code_theme = code_theme

    @property
    def width(self) -> int:
        return self._width

    def set_width(self, width: int) -> None:
        self._width = max(MIN_WRAP_WIDTH, width)

    def render(self, text: str, width: int | None = None) -> Result[str, str]:
        wrap = self._width if width is None else max(MIN_WRAP_WIDTH, width)
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            width=wrap,
            force_terminal=True,
            color_system="truecolor",
            legacy_windows=False,
            soft_wrap=False,
            emoji=False,
            highlight=False,
        )
        try:
            console.print(Markdown(text, code_theme=self._code_theme, hyperlinks=False))
        except Exception as exc:  # noqa: BLE001
            return Err(f"Render failed: {exc}")
        return Ok(buffer.getvalue().rstrip("\n"))
