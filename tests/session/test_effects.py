from __future__ import annotations

from result import Err, Ok, Result

from skim.config.defaults import default_config
from skim.services.watcher import WatchChanged, WatchError
from skim.session.effects import perform, read_file
from skim.session.messages import (
    FileChanged,
    FileLoaded,
    FileLoadFailed,
    LoadFile,
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
from tests.fs_mock import MemoryFileSystem


class _FakeWatcher:
    def __init__(self, events: list[WatchChanged | WatchError | None] | None = None) -> None:
        self.events = list(events or [])
        self.watched: list[str] = []
        self.closed = False
        self.fail = False

    def watch(self, path: str) -> Result[str, WatchError]:
        if self.fail:
            return Err(WatchError(path=path, message="Cannot watch file"))
        self.watched.append(path)
        return Ok(path)

    def wait_for_event(self, timeout: float | None = None) -> WatchChanged | WatchError | None:
        return self.events.pop(0) if self.events else None

    def close(self) -> None:
        self.closed = True


def test_scan_root_success_and_failure() -> None:
    fs = MemoryFileSystem().add_file("/root/a.md")
    policy = default_config().scan_policy()
    watcher = _FakeWatcher()

    done = perform(ScanRoot(root="/root", policy=policy), watcher, fs)  # type: ignore[arg-type]
    failed = perform(ScanRoot(root="/missing", policy=policy), watcher, fs)  # type: ignore[arg-type]

    assert isinstance(done, ScanCompleted)
    assert [n.name for n in done.nodes] == ["a.md"]
    assert isinstance(failed, ScanFailed)


def test_load_file_success_and_failure() -> None:
    fs = MemoryFileSystem().add_file("/root/a.md", content="# A").add_file("/root/secret.md").deny("/root/secret.md")
    watcher = _FakeWatcher()

    loaded = perform(LoadFile(path="/root/a.md"), watcher, fs)  # type: ignore[arg-type]
    assert loaded == FileLoaded(path="/root/a.md", content="# A")
    missing = read_file("/root/gone.md", fs)
    denied = read_file("/root/secret.md", fs)

    assert isinstance(missing, FileLoadFailed)
    assert missing.error == "No such file or directory"
    assert isinstance(denied, FileLoadFailed)
    assert denied.error == "Permission denied"


def test_start_watching() -> None:
    watcher = _FakeWatcher()

    started = perform(StartWatching(path="/root/a.md"), watcher)  # type: ignore[arg-type]
    assert started == WatchStarted(path="/root/a.md")
    watcher.fail = True
    assert isinstance(perform(StartWatching(path="/root/b.md"), watcher), WatchFailed)  # type: ignore[arg-type]


def test_wait_for_change_translates_watcher_events() -> None:
    error = WatchError(path="/root", message="Watched directory was removed")
    watcher = _FakeWatcher([WatchChanged(path="/root/a.md"), error, None])

    assert perform(WaitForChange(), watcher) == FileChanged(path="/root/a.md")  # type: ignore[arg-type]
    assert perform(WaitForChange(), watcher) == WatchErrored(error=error)  # type: ignore[arg-type]
    assert perform(WaitForChange(), watcher) is None  # type: ignore[arg-type]


def test_quit_closes_watcher() -> None:
    watcher = _FakeWatcher()

    assert perform(Quit(), watcher) is None  # type: ignore[arg-type]
    assert watcher.closed
