from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from result import Result

from skim.models.enums import NodeKind

DEFAULT_EXTENSIONS: frozenset[str] = frozenset({".md", ".markdown"})


@dataclass(slots=True, eq=False)
class TreeNode:
    path: str
    name: str
    kind: NodeKind
    depth: int
    expanded: bool = False
    children: list[TreeNode] = field(default_factory=list)
    loaded: bool = False

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIRECTORY

    @property
    def display_name(self) -> str:
        return f"{self.name}/" if self.is_dir else self.name


@dataclass(slots=True, frozen=True)
class ScanPolicy:
    show_hidden: bool = False
    markdown_only: bool = True
    max_depth: int = -1
    ignore_names: frozenset[str] = frozenset()
    show_ignored: bool = False
    extensions: frozenset[str] = DEFAULT_EXTENSIONS

    def with_show_ignored(self, show_ignored: bool) -> ScanPolicy:
        return replace(self, show_ignored=show_ignored)


@dataclass(slots=True, frozen=True)
class FlatRow:
    node: TreeNode
    depth: int


class ScanErrorCode(str, Enum):
    NOT_FOUND = "not_found"
    NOT_DIRECTORY = "not_directory"
    ROOT_STAT_FAILED = "root_stat_failed"
    READ_FAILED = "read_failed"


@dataclass(slots=True, frozen=True)
class ScanError:
    code: ScanErrorCode
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.path}"


ScanResult = Result[list[TreeNode], ScanError]
