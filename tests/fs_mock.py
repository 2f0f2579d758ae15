from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

from skim.services.fs import DirEntry, StatResult


@dataclass
class _MockEntry:
    is_dir: bool
    content: str


class MemoryFileSystem:
    def __init__(self) -> None:
        self._entries: dict[str, _MockEntry] = {}
        self.unreadable: set[str] = set()
        self.scandir_calls: list[str] = []

    def add_dir(self, path: str) -> MemoryFileSystem:
        key = self._normalize(path)
        self._add_parents(key)
        self._entries[key] = _MockEntry(is_dir=True, content="")
        return self

    def add_file(self, path: str, content: str = "") -> MemoryFileSystem:
        key = self._normalize(path)
        self._add_parents(key)
        self._entries[key] = _MockEntry(is_dir=False, content=content)
        return self

    def deny(self, path: str) -> MemoryFileSystem:
        """Make listing or reading *path* fail with PermissionError."""
        self.unreadable.add(self._normalize(path))
        return self

    def remove(self, path: str) -> None:
        key = self._normalize(path)
        for p in [p for p in self._entries if p == key or p.startswith(key + "/")]:
            del self._entries[p]

    def _add_parents(self, key: str) -> None:
        for parent in reversed(PurePosixPath(key).parents):
            pk = str(parent)
            if pk not in self._entries:
                self._entries[pk] = _MockEntry(is_dir=True, content="")

    def expanduser(self, path: str) -> str:
        return path.replace("~", "/mock/home")

    def exists(self, path: str) -> bool:
        return self._normalize(path) in self._entries

    def absolute(self, path: str) -> str:
        return self._normalize(path)

    def stat(self, path: str) -> StatResult:
        key = self._normalize(path)
        entry = self._entries.get(key)
        if entry is None:
            raise OSError(f"No such file or directory: '{key}'")
        return StatResult(size=len(entry.content), is_dir=entry.is_dir)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        key = self._normalize(path)
        if key in self.unreadable:
            raise PermissionError(13, "Permission denied", key)
        entry = self._entries.get(key)
        if entry is None:
            raise FileNotFoundError(2, "No such file or directory", key)
        return entry.content

    def scandir(self, path: str) -> list[DirEntry]:
        key = self._normalize(path)
        self.scandir_calls.append(key)
        if key in self.unreadable:
            raise PermissionError(13, "Permission denied", key)
        entry = self._entries.get(key)
        if entry is None:
            raise OSError(f"No such file or directory: '{key}'")
        prefix = key.rstrip("/") + "/"
        result: list[DirEntry] = []
        seen: set[str] = set()
        for p in self._entries:
            if p == key or not p.startswith(prefix):
                continue
            child_name = p[len(prefix) :].split("/", 1)[0]
            child_path = prefix + child_name
            if child_path in seen:
                continue
            seen.add(child_path)
            child_entry = self._entries.get(child_path)
            st = (
                StatResult(size=len(child_entry.content), is_dir=child_entry.is_dir)
                if child_entry is not None
                else None
            )
            result.append(DirEntry(path=child_path, name=child_name, stat=st))
        return result

    @staticmethod
    def _normalize(path: str) -> str:
        return path.rstrip("/") or "/"
