"""Closed sets of messages (inputs to the dispatch loop) and commands (its requests).

Everything that can change session state arrives as one of the ``Message``
variants; everything the session asks the outside world to do leaves as one
of the ``Command`` variants. Completions of commands come back as messages.
"""

from __future__ import annotations

from dataclasses import dataclass

from skim.models.events import DirectoryToggled, FileSelected, FilterChanged
from skim.models.tree import ScanError, ScanPolicy, TreeNode
from skim.services.watcher import WatchError

# -- messages -------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class KeyPressed:
    key: str
    text: str = ""


@dataclass(slots=True, frozen=True)
class MouseScrolled:
    x: int
    delta: int


@dataclass(slots=True, frozen=True)
class Resized:
    width: int
    height: int


@dataclass(slots=True, frozen=True)
class ScanCompleted:
    nodes: list[TreeNode]


@dataclass(slots=True, frozen=True)
class ScanFailed:
    error: ScanError


@dataclass(slots=True, frozen=True)
class FileLoaded:
    path: str
    content: str


@dataclass(slots=True, frozen=True)
class FileLoadFailed:
    path: str
    error: str


@dataclass(slots=True, frozen=True)
class WatchStarted:
    path: str


@dataclass(slots=True, frozen=True)
class WatchFailed:
    error: WatchError


@dataclass(slots=True, frozen=True)
class FileChanged:
    path: str


@dataclass(slots=True, frozen=True)
class WatchErrored:
    error: WatchError


Message = (
    KeyPressed
    | MouseScrolled
    | Resized
    | ScanCompleted
    | ScanFailed
    | FileLoaded
    | FileLoadFailed
    | WatchStarted
    | WatchFailed
    | FileChanged
    | WatchErrored
    | FileSelected
    | DirectoryToggled
    | FilterChanged
)

# -- commands -------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class ScanRoot:
    root: str
    policy: ScanPolicy


@dataclass(slots=True, frozen=True)
class LoadFile:
    path: str


@dataclass(slots=True, frozen=True)
class StartWatching:
    path: str


@dataclass(slots=True, frozen=True)
class WaitForChange:
    pass


@dataclass(slots=True, frozen=True)
class Quit:
    pass


Command = ScanRoot | LoadFile | StartWatching | WaitForChange | Quit

__all__ = [
    "Command",
    "DirectoryToggled",
    "FileChanged",
    "FileLoadFailed",
    "FileLoaded",
    "FileSelected",
    "FilterChanged",
    "KeyPressed",
    "LoadFile",
    "Message",
    "MouseScrolled",
    "Quit",
    "Resized",
    "ScanCompleted",
    "ScanFailed",
    "ScanRoot",
    "StartWatching",
    "WaitForChange",
    "WatchErrored",
    "WatchFailed",
    "WatchStarted",
]
