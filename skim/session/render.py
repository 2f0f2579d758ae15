"""Pure projection of session state into styled text blocks.

Nothing here mutates the controller; the terminal driver only has to place
the returned blocks in its panels.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from rich.text import Text

from skim.models.enums import Mode, Panel
from skim.models.tree import FlatRow
from skim.session.controller import SessionController
from skim.session.layout import content_height, fullscreen_content_height

TITLE = "skim"

EXPANDED_MARK = "▾"
COLLAPSED_MARK = "▸"
SELECTED_MARK = "◀"

ACCENT = "#81a2be"
FOREGROUND = "#c5c8c6"
MUTED = "#969896"
GREEN = "#b5bd68"
YELLOW = "#f0c674"
RED = "#cc6666"

MAX_ERROR_LENGTH = 60

HELP_SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Navigation",
        (
            ("↑ / k", "Move up"),
            ("↓ / j", "Move down"),
            ("Enter", "Open file / Toggle folder"),
            ("l / h", "Expand / Collapse or parent"),
            ("Tab", "Switch panel focus"),
            ("i", "Toggle ignored directories"),
        ),
    ),
    (
        "Preview",
        (
            ("PgUp / Ctrl+u", "Scroll up half page"),
            ("PgDn / Ctrl+d", "Scroll down half page"),
            ("g", "Go to top"),
            ("G", "Go to bottom"),
            ("f", "Toggle fullscreen mode"),
        ),
    ),
    (
        "File Tree Filter",
        (
            ("/", "Enter filter mode (file tree)"),
            ("Esc", "Clear filter / Exit"),
            ("Enter", "Accept filter"),
        ),
    ),
    (
        "Preview Search",
        (
            ("/", "Search in content (preview)"),
            ("n", "Next match"),
            ("N", "Previous match"),
            ("Esc", "Clear search"),
        ),
    ),
    (
        "General",
        (
            ("?", "Toggle this help"),
            ("q / Ctrl+c", "Quit"),
        ),
    ),
)


@dataclass(slots=True)
class Frame:
    header: Text
    tree: Text
    preview: Text
    status: Text
    help: Text | None
    fullscreen: bool
    focused: Panel
    tree_width: int
    preview_width: int
    body_height: int


def truncate(text: str, limit: int) -> str:
    if limit <= 0:
        return ""
    if len(text) <= limit:
        return text
    if limit == 1:
        return "…"
    return text[: limit - 1] + "…"


def truncate_left(path: str, limit: int) -> str:
    """Shorten *path* from the left, marking the cut with ``~``."""
    if len(path) > limit > 10:
        return "~" + path[len(path) - limit + 1 :]
    return path


def render_header(controller: SessionController) -> Text:
    title = f" {TITLE} "
    path = truncate_left(controller.root_path, controller.width - len(title) - 4)
    header = Text()
    header.append(title, style=f"bold #1d1f21 on {ACCENT}")
    header.append(" " * max(1, controller.width - len(title) - len(path)))
    header.append(path, style=MUTED)
    return header


def _tree_line(row: FlatRow, selected: bool, width: int) -> Text:
    node = row.node
    line = Text("  " * row.depth)
    if node.is_dir:
        mark = EXPANDED_MARK if node.expanded else COLLAPSED_MARK
        line.append(f"{mark} ", style=ACCENT)
        line.append(node.display_name, style=f"bold {ACCENT}" if not selected else f"bold reverse {ACCENT}")
    else:
        line.append("  ")
        line.append(node.name, style=f"bold {GREEN}" if selected else FOREGROUND)
        if selected:
            line.append(f" {SELECTED_MARK}", style=ACCENT)
    line.truncate(width, overflow="ellipsis")
    return line


def render_tree(controller: SessionController, width: int, height: int) -> Text:
    tree = controller.tree
    lines: list[Text] = []

    if controller.shows_filter_prompt:
        prompt = Text("Filter: ", style=f"bold {ACCENT}")
        prompt.append(tree.filter_text + ("_" if controller.filter_active else ""), style=FOREGROUND)
        prompt.truncate(width, overflow="ellipsis")
        lines.extend([prompt, Text()])

    if not tree.scanned and controller.scanning:
        lines.append(Text("Scanning…", style=MUTED))
    elif not tree.scanned:
        lines.append(Text("Could not read directory", style=f"bold {RED}", justify="center"))
        if controller.last_error:
            lines.append(Text())
            lines.append(Text(truncate(controller.last_error, MAX_ERROR_LENGTH), style=MUTED, justify="center"))
    elif not tree.rows:
        if tree.has_active_filter:
            lines.append(Text("No matches", style=MUTED))
        else:
            lines.append(Text("No Markdown Files", style=f"bold {YELLOW}", justify="center"))
            lines.append(Text())
            lines.append(Text("This directory contains no .md files.", style=MUTED, justify="center"))
            lines.append(Text("Try navigating to a different directory.", style=MUTED, justify="center"))
    else:
        selected = tree.selected_index
        for index, row in enumerate(tree.visible_rows(), start=tree.offset):
            lines.append(_tree_line(row, index == selected, width))

    return Text("\n").join(lines[:height])


def render_preview(controller: SessionController) -> Text:
    return Text.from_ansi("\n".join(controller.viewport.visible_lines()))


def _status_left(controller: SessionController) -> Text:
    viewport = controller.viewport
    tree = controller.tree
    parts: list[Text] = []

    if controller.scanning:
        parts.append(Text("Scanning…", style=YELLOW))
    if controller.loading:
        parts.append(Text("Loading…", style=YELLOW))

    if controller.mode is Mode.PREVIEW_SEARCH_INPUT:
        parts.append(Text(f"/{viewport.search_input}_", style=f"bold {ACCENT}"))
    elif viewport.has_active_search:
        index = viewport.current_match_index or 0
        parts.append(Text(f"Match {index + 1}/{viewport.match_count} for '{viewport.search_query}'", style=ACCENT))
    elif viewport.search_query:
        parts.append(Text(f"No matches for '{viewport.search_query}'", style=YELLOW))

    if tree.has_active_filter and not controller.filter_active:
        parts.append(Text(f"Filter: '{tree.filter_text}'", style=ACCENT))

    if viewport.file_path and not viewport.is_error:
        name = os.path.basename(viewport.file_path)
        parts.append(Text(f"{name} {round(viewport.scroll_percent * 100)}%", style=FOREGROUND))

    if controller.last_error:
        parts.append(Text(f"Error: {truncate(controller.last_error, MAX_ERROR_LENGTH)}", style=RED))

    return Text(" | ", style=MUTED).join(parts)


def _status_hints(controller: SessionController) -> str:
    match controller.mode:
        case Mode.TREE_FILTERING:
            return "type to filter | ⏎ accept | Esc clear"
        case Mode.PREVIEW_SEARCH_INPUT:
            return "type to search | ⏎ search | Esc cancel"
        case Mode.HELP_VISIBLE:
            return "? / Esc close help"
        case Mode.NAVIGATING:
            pass
    if controller.fullscreen:
        hints = "↑↓ scroll | / search | f exit fullscreen"
        if controller.viewport.has_active_search:
            hints += " | n/N next/prev | Esc clear"
        return hints + " | q quit"
    if controller.focused_panel is Panel.PREVIEW:
        return "↑↓ scroll | / search | n/N match | f fullscreen | Tab switch | ? help | q quit"
    return "↑↓ navigate | ⏎ open | / filter | i ignored | Tab switch | ? help | q quit"


def render_status(controller: SessionController) -> Text:
    width = max(0, controller.width - 2)
    left = _status_left(controller)
    left.truncate(width, overflow="ellipsis")
    gap = 4
    hints = truncate(_status_hints(controller), width - len(left.plain) - gap)
    status = Text(" ")
    status.append_text(left)
    if hints and len(hints) > 1:
        status.append(" " * max(gap, width - len(left.plain) - len(hints)))
        status.append(hints, style=MUTED)
    return status


def render_help() -> Text:
    help_text = Text("Keyboard Shortcuts\n", style=f"bold {ACCENT}")
    for title, bindings in HELP_SECTIONS:
        help_text.append(f"\n{title}\n", style=f"bold {GREEN}")
        for key, desc in bindings:
            help_text.append(f"  {key:<16}", style=ACCENT)
            help_text.append(f"{desc}\n", style=MUTED)
    help_text.append("\nPress ? or Esc to close", style=f"italic {MUTED}")
    return help_text


def render_frame(controller: SessionController) -> Frame:
    if controller.fullscreen:
        body = fullscreen_content_height(controller.height)
        tree = Text()
    else:
        body = content_height(controller.height)
        tree = render_tree(controller, max(1, controller.tree_width - 2), body)
    return Frame(
        header=render_header(controller),
        tree=tree,
        preview=render_preview(controller),
        status=render_status(controller),
        help=render_help() if controller.mode is Mode.HELP_VISIBLE else None,
        fullscreen=controller.fullscreen,
        focused=controller.focused_panel,
        tree_width=controller.tree_width,
        preview_width=controller.preview_width,
        body_height=body,
    )
