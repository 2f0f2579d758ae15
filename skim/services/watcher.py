"""Debounced single-file watcher.

``FileWatcher`` is a small actor: callers talk to it only through ``watch``,
``unwatch``, ``close`` and ``wait_for_event``. Internally a watchdog observer
thread delivers raw notifications for the watched file's directory; the ones
that concern the watched file restart a debounce timer, and only when the
timer runs out is the path pushed onto the bounded ``events`` queue.

Both outbound queues are fed with ``put_nowait``: when the consumer is behind,
new items are dropped instead of blocking the observer thread.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from dataclasses import dataclass
from typing import Callable

from result import Err, Ok, Result
from typing_extensions import override
from watchdog.events import (
    DirDeletedEvent,
    DirMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE = 0.1
QUEUE_SIZE = 10
_POLL_INTERVAL = 0.05

_CHANGE_EVENTS = frozenset({"modified", "created", "moved"})


@dataclass(slots=True, frozen=True)
class WatchError:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.path}" if self.path else self.message


@dataclass(slots=True, frozen=True)
class WatchChanged:
    path: str


WatchEvent = WatchChanged | WatchError


def _norm(path: str | bytes) -> str:
    if isinstance(path, bytes):
        path = os.fsdecode(path)
    return os.path.abspath(path)


class _NotificationHandler(FileSystemEventHandler):
    def __init__(self, watcher: FileWatcher) -> None:
        super().__init__()
        self._watcher = watcher

    @override
    def on_any_event(self, event: FileSystemEvent) -> None:
        self._watcher._on_notification(event)


class FileWatcher:
    def __init__(
        self,
        debounce: float = DEFAULT_DEBOUNCE,
        queue_size: int = QUEUE_SIZE,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        self._debounce = debounce
        self.events: queue.Queue[str] = queue.Queue(maxsize=queue_size)
        self.errors: queue.Queue[WatchError] = queue.Queue(maxsize=queue_size)

        self._control = threading.Lock()
        self._lock = threading.Lock()
        self._watched_path: str | None = None
        self._watch: ObservedWatch | None = None
        self._timer: threading.Timer | None = None
        self._closed = threading.Event()

        self._handler = _NotificationHandler(self)
        self._observer = observer_factory()
        self._observer.daemon = True
        self._observer.start()

    @property
    def watched_path(self) -> str | None:
        with self._lock:
            return self._watched_path

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def watch(self, path: str) -> Result[str, WatchError]:
        """Start watching *path*, replacing (and first removing) any previous watch.

        Re-watching the current path keeps the existing watch and any pending
        debounce timer.
        """
        target = _norm(path)
        with self._control:
            if self._closed.is_set():
                return Err(WatchError(path=target, message="Watcher is closed"))
            with self._lock:
                unchanged = self._watch is not None and self._watched_path == target
            if unchanged:
                return Ok(target)
            self._detach()
            try:
                watch = self._observer.schedule(self._handler, os.path.dirname(target), recursive=False)
            except (OSError, RuntimeError) as exc:
                logger.warning("Cannot watch %s: %s", target, exc)
                return Err(WatchError(path=target, message=f"Cannot watch file ({exc})"))
            with self._lock:
                self._watch = watch
                self._watched_path = target
        logger.debug("Watching %s", target)
        return Ok(target)

    def unwatch(self) -> None:
        with self._control:
            self._detach()

    def close(self) -> None:
        with self._control:
            if self._closed.is_set():
                return
            self._closed.set()
            self._detach()
        self._observer.stop()
        if self._observer.is_alive():
            self._observer.join(timeout=1.0)
        logger.debug("Watcher closed")

    def _detach(self) -> None:
        # The observer holds its own lock while calling handlers, so it must
        # never be called into while self._lock is held.
        with self._lock:
            self._cancel_timer()
            self._watched_path = None
            watch, self._watch = self._watch, None
        if watch is None:
            return
        try:
            self._observer.unschedule(watch)
        except (KeyError, OSError) as exc:
            logger.debug("Unscheduling stale watch failed: %s", exc)

    def wait_for_event(self, timeout: float | None = None) -> WatchEvent | None:
        """Block until a change or an error is available.

        Returns ``None`` when the watcher is closed or *timeout* elapses first.
        """
        remaining = timeout
        while not self._closed.is_set():
            try:
                return self.errors.get_nowait()
            except queue.Empty:
                pass
            wait = _POLL_INTERVAL if remaining is None else max(0.0, min(_POLL_INTERVAL, remaining))
            try:
                return WatchChanged(path=self.events.get(timeout=wait))
            except queue.Empty:
                pass
            if remaining is not None:
                remaining -= wait
                if remaining <= 0:
                    return None
        return None

    # -- observer thread -------------------------------------------------

    def _on_notification(self, event: FileSystemEvent) -> None:
        with self._lock:
            current = self._watched_path
        if current is None:
            return

        if isinstance(event, (DirDeletedEvent, DirMovedEvent)) and _norm(event.src_path) == os.path.dirname(current):
            self._report_error(WatchError(path=current, message="Watched directory was removed"))
            return

        if event.is_directory or event.event_type not in _CHANGE_EVENTS:
            return
        if event.event_type == "moved":
            target = _norm(event.dest_path)
        else:
            target = _norm(event.src_path)
        if target != current:
            return

        with self._lock:
            if self._closed.is_set() or self._watched_path != current:
                return
            self._cancel_timer()
            self._timer = threading.Timer(self._debounce, self._fire, args=(current,))
            self._timer.daemon = True
            self._timer.start()

    def _fire(self, path: str) -> None:
        with self._lock:
            if self._watched_path != path or self._closed.is_set():
                return
            self._timer = None
        try:
            self.events.put_nowait(path)
        except queue.Full:
            logger.debug("Dropping change event for %s: queue full", path)

    def _report_error(self, error: WatchError) -> None:
        logger.warning("Watch error: %s", error)
        try:
            self.errors.put_nowait(error)
        except queue.Full:
            logger.debug("Dropping watch error: queue full")

    # Callers hold self._lock.
    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
