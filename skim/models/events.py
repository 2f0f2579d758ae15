from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class FileSelected:
    path: str


@dataclass(slots=True, frozen=True)
class DirectoryToggled:
    path: str
    expanded: bool


@dataclass(slots=True, frozen=True)
class FilterChanged:
    active: bool
    value: str


TreeEvent = FileSelected | DirectoryToggled | FilterChanged
