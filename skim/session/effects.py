from __future__ import annotations

import logging
from typing import assert_never

from result import Err

from skim.services.fs import DEFAULT_FS, FileSystem
from skim.services.scanner import scan_directory
from skim.services.watcher import FileWatcher, WatchChanged, WatchError
from skim.session.messages import (
    Command,
    FileChanged,
    FileLoaded,
    FileLoadFailed,
    LoadFile,
    Message,
    Quit,
    ScanCompleted,
    ScanFailed,
    ScanRoot,
    StartWatching,
    WaitForChange,
    WatchErrored,
    WatchFailed,
    WatchStarted,
)

logger = logging.getLogger(__name__)


def read_file(path: str, fs: FileSystem = DEFAULT_FS) -> FileLoaded | FileLoadFailed:
    try:
        content = fs.read_text(path)
    except (OSError, UnicodeError) as exc:
        message = exc.strerror if isinstance(exc, OSError) and exc.strerror else str(exc)
        return FileLoadFailed(path=path, error=message)
    return FileLoaded(path=path, content=content)


def perform(command: Command, watcher: FileWatcher, fs: FileSystem = DEFAULT_FS) -> Message | None:
    """Run the blocking part of *command* and describe the outcome as a message.

    Meant to run off the dispatch loop. ``Quit`` and a ``WaitForChange`` that
    ends because the watcher was closed produce no message.
    """
    match command:
        case ScanRoot(root, policy):
            result = scan_directory(root, policy, fs)
            if isinstance(result, Err):
                return ScanFailed(error=result.unwrap_err())
            return ScanCompleted(nodes=result.unwrap())
        case LoadFile(path):
            return read_file(path, fs)
        case StartWatching(path):
            started = watcher.watch(path)
            if isinstance(started, Err):
                return WatchFailed(error=started.unwrap_err())
            return WatchStarted(path=started.unwrap())
        case WaitForChange():
            event = watcher.wait_for_event()
            match event:
                case None:
                    return None
                case WatchChanged(path):
                    return FileChanged(path=path)
                case WatchError():
                    return WatchErrored(error=event)
                case _:
                    assert_never(event)
        case Quit():
            watcher.close()
            return None
        case _:
            assert_never(command)
