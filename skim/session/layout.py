from __future__ import annotations

# Header, blank line, panel borders (2), blank line, status bar.
CHROME_HEIGHT = 6
# Panel borders (2) and status bar.
FULLSCREEN_CHROME_HEIGHT = 3
PANEL_BORDER = 2


def panel_widths(width: int, ratio: float = 0.25, min_tree: int = 20, min_preview: int = 30) -> tuple[int, int]:
    """Split the usable width (two bordered panels) between tree and preview."""
    usable = width - 2 * PANEL_BORDER
    tree = int(usable * ratio)
    preview = usable - tree
    if tree < min_tree:
        tree = min_tree
        preview = usable - tree
    if preview < min_preview:
        preview = min_preview
        tree = usable - preview
    return tree, preview


def content_height(height: int) -> int:
    return max(1, height - CHROME_HEIGHT)


def fullscreen_content_height(height: int) -> int:
    return max(1, height - FULLSCREEN_CHROME_HEIGHT)
