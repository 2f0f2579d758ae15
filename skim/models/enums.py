from __future__ import annotations

from enum import Enum


class NodeKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class Panel(str, Enum):
    TREE = "tree"
    PREVIEW = "preview"


class Mode(str, Enum):
    NAVIGATING = "navigating"
    TREE_FILTERING = "tree_filtering"
    PREVIEW_SEARCH_INPUT = "preview_search_input"
    HELP_VISIBLE = "help_visible"
