from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from result import Err

from skim.models.events import DirectoryToggled, FileSelected, FilterChanged, TreeEvent
from skim.models.tree import FlatRow, ScanPolicy, TreeNode
from skim.services.fs import DEFAULT_FS, FileSystem
from skim.services.scanner import scan_children

logger = logging.getLogger(__name__)


def iter_nodes(roots: Iterable[TreeNode]) -> Iterator[TreeNode]:
    """Iterate every loaded node in the forest (depth-first, display order)."""
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def flatten(roots: Iterable[TreeNode]) -> list[FlatRow]:
    """Project the forest into display rows; children only under expanded directories."""
    rows: list[FlatRow] = []
    stack: list[TreeNode] = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        rows.append(FlatRow(node=node, depth=node.depth))
        if node.is_dir and node.expanded:
            stack.extend(reversed(node.children))
    return rows


class TreeModel:
    """The in-memory forest plus the cursor and name filter layered over it."""

    def __init__(self, root_path: str, policy: ScanPolicy, fs: FileSystem = DEFAULT_FS) -> None:
        self.root_path = root_path
        self.policy = policy
        self._fs = fs

        self.roots: list[TreeNode] = []
        self.parent_by_path: dict[str, str] = {}
        self.all_rows: list[FlatRow] = []
        self.rows: list[FlatRow] = []
        self.selected_index = 0
        self.offset = 0
        self.filter_text = ""
        self.width = 0
        self.height = 0
        self.scanned = False

    def set_roots(self, nodes: list[TreeNode]) -> None:
        """Replace the whole forest, keeping the cursor on the same path if it survives."""
        previous = self.selected_node
        self.roots = nodes
        self.parent_by_path = {}
        self._index(nodes, None)
        self.scanned = True
        self.rebuild()
        if previous is not None:
            self.select_path(previous.path)

    def set_policy(self, policy: ScanPolicy) -> None:
        self.policy = policy

    def _index(self, nodes: Iterable[TreeNode], parent: TreeNode | None) -> None:
        for node in nodes:
            if parent is not None:
                self.parent_by_path[node.path] = parent.path
            if node.children:
                self._index(node.children, node)

    def parent_of(self, node: TreeNode) -> TreeNode | None:
        parent_path = self.parent_by_path.get(node.path)
        if parent_path is None:
            return None
        for candidate in iter_nodes(self.roots):
            if candidate.path == parent_path:
                return candidate
        return None

    def rebuild(self) -> None:
        self.all_rows = flatten(self.roots)
        self.rows = self._filter_rows(self.all_rows)
        self._clamp()

    def _filter_rows(self, rows: list[FlatRow]) -> list[FlatRow]:
        if not self.filter_text:
            return rows
        needle = self.filter_text.lower()
        return [row for row in rows if needle in row.node.name.lower()]

    def _clamp(self) -> None:
        self.selected_index = max(0, min(self.selected_index, len(self.rows) - 1))
        if self.height <= 0:
            self.offset = 0
            return
        if self.selected_index < self.offset:
            self.offset = self.selected_index
        elif self.selected_index >= self.offset + self.height:
            self.offset = self.selected_index - self.height + 1
        self.offset = max(0, min(self.offset, max(0, len(self.rows) - self.height)))

    def set_size(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self._clamp()

    @property
    def selected_node(self) -> TreeNode | None:
        if not self.rows:
            return None
        return self.rows[self.selected_index].node

    def select_path(self, path: str) -> bool:
        for index, row in enumerate(self.rows):
            if row.node.path == path:
                self.selected_index = index
                self._clamp()
                return True
        return False

    def visible_rows(self) -> list[FlatRow]:
        if self.height <= 0:
            return list(self.rows)
        return self.rows[self.offset : self.offset + self.height]

    def move_selection(self, delta: int) -> None:
        if not self.rows:
            return
        self.selected_index = max(0, min(len(self.rows) - 1, self.selected_index + delta))
        self._clamp()

    def move_to_top(self) -> None:
        self.move_selection(-len(self.rows))

    def move_to_bottom(self) -> None:
        self.move_selection(len(self.rows))

    def toggle(self, node: TreeNode) -> DirectoryToggled | None:
        if not node.is_dir:
            return None
        node.expanded = not node.expanded
        if node.expanded and not node.loaded:
            self._load_children(node)
        self.rebuild()
        return DirectoryToggled(path=node.path, expanded=node.expanded)

    def _load_children(self, node: TreeNode) -> None:
        result = scan_children(node, self.policy, self._fs)
        if isinstance(result, Err):
            logger.warning("Could not expand %s: %s", node.path, result.unwrap_err())
            node.children = []
            return
        node.children = result.unwrap()
        node.loaded = True
        self._index(node.children, node)

    def activate(self) -> TreeEvent | None:
        node = self.selected_node
        if node is None:
            return None
        if node.is_dir:
            return self.toggle(node)
        return FileSelected(path=node.path)

    def expand_selected(self) -> TreeEvent | None:
        node = self.selected_node
        if node is None:
            return None
        if not node.is_dir:
            return FileSelected(path=node.path)
        if node.expanded:
            self.move_selection(1)
            return None
        return self.toggle(node)

    def collapse_or_parent(self) -> TreeEvent | None:
        node = self.selected_node
        if node is None:
            return None
        if node.is_dir and node.expanded:
            return self.toggle(node)
        parent = self.parent_of(node)
        if parent is not None:
            self.select_path(parent.path)
        return None

    def set_filter(self, text: str, active: bool = True) -> FilterChanged:
        self.filter_text = text
        self.selected_index = 0
        self.offset = 0
        self.rebuild()
        return FilterChanged(active=active, value=text)

    def clear_filter(self) -> FilterChanged:
        return self.set_filter("", active=False)

    @property
    def has_active_filter(self) -> bool:
        return bool(self.filter_text)
