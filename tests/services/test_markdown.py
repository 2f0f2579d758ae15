from __future__ import annotations

from result import Ok

from skim.services.ansi import strip_ansi
from skim.services.markdown import MIN_WRAP_WIDTH, MarkdownRenderer


def test_render_produces_styled_text() -> None:
    result = MarkdownRenderer(width=60).render("# Title\n\nSome **bold** text.")

    assert isinstance(result, Ok)
    styled = result.unwrap()
    assert "\x1b[" in styled
    visible = strip_ansi(styled)
    assert "Title" in visible
    assert "bold" in visible


def test_render_wraps_to_width() -> None:
    renderer = MarkdownRenderer(width=30)
    text = " ".join(["word"] * 40)

    styled = renderer.render(text).unwrap()

    assert all(len(line.rstrip()) <= 30 for line in strip_ansi(styled).split("\n"))


def test_width_has_a_floor() -> None:
    renderer = MarkdownRenderer(width=5)
    assert renderer.width == MIN_WRAP_WIDTH
    renderer.set_width(50)
    assert renderer.width == 50
