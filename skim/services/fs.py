from __future__ import annotations

import os
import stat as statmod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol


@dataclass(slots=True, frozen=True)
class StatResult:
    size: int
    is_dir: bool


@dataclass(slots=True, frozen=True)
class DirEntry:
    path: str
    name: str
    stat: StatResult | None = None


class FileSystem(Protocol):
    def expanduser(self, path: str) -> str: ...

    def exists(self, path: str) -> bool: ...

    def absolute(self, path: str) -> str: ...

    def stat(self, path: str) -> StatResult: ...

    def scandir(self, path: str) -> Iterable[DirEntry]: ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str: ...


class OsFileSystem:
    def expanduser(self, path: str) -> str:
        return str(Path(path).expanduser())

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def absolute(self, path: str) -> str:
        return os.path.abspath(path)

    def stat(self, path: str) -> StatResult:
        st = os.stat(path)
        return StatResult(size=st.st_size, is_dir=statmod.S_ISDIR(st.st_mode))

    def scandir(self, path: str) -> Iterable[DirEntry]:
        # Materialised so a read error surfaces here rather than mid-iteration.
        entries: list[DirEntry] = []
        with os.scandir(path) as it:
            for e in it:
                try:
                    sr = StatResult(size=0, is_dir=e.is_dir(follow_symlinks=False))
                except OSError:
                    sr = None
                entries.append(DirEntry(path=e.path, name=e.name, stat=sr))
        return entries

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        return Path(path).read_text(encoding=encoding, errors="replace")


DEFAULT_FS: FileSystem = OsFileSystem()
