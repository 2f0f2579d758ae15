"""The single dispatch point of a browsing session.

``SessionController.dispatch`` takes one message, mutates the tree, the
viewport and its own focus/mode state, and returns the commands the driver
has to run next. It never performs I/O itself: scanning, reading files and
waiting on the watcher all happen in ``skim.session.effects`` and come back
later as messages.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import assert_never

from skim.config.defaults import default_config
from skim.config.schema import AppConfig
from skim.models.enums import Mode, Panel
from skim.models.events import TreeEvent
from skim.services.fs import DEFAULT_FS, FileSystem
from skim.services.tree import TreeModel
from skim.services.viewport import Viewport
from skim.session.layout import content_height, fullscreen_content_height, panel_widths
from skim.session.messages import (
    Command,
    DirectoryToggled,
    FileChanged,
    FileLoaded,
    FileLoadFailed,
    FileSelected,
    FilterChanged,
    KeyPressed,
    LoadFile,
    Message,
    MouseScrolled,
    Quit,
    Resized,
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

HELP_DISMISS_KEYS = frozenset({"?", "esc", "enter", "q"})
WHEEL_LINES = 3
# "Filter: ..." prompt plus a blank separator line.
FILTER_PROMPT_HEIGHT = 2


def _printable(text: str) -> bool:
    return len(text) == 1 and text.isprintable()


class SessionController:
    def __init__(
        self,
        root_path: str,
        config: AppConfig | None = None,
        fs: FileSystem = DEFAULT_FS,
        viewport: Viewport | None = None,
    ) -> None:
        self.config = config or default_config()
        self.root_path = root_path
        self.tree = TreeModel(root_path, self.config.scan_policy(), fs)
        self.viewport = viewport or Viewport()
        self.viewport.show_welcome()

        self.focused_panel = Panel.TREE
        self.fullscreen = False
        self.mode = Mode.NAVIGATING
        self.filter_active = False
        self.loading = False
        self.scanning = False
        self.last_error: str | None = None
        self.width = 0
        self.height = 0
        self.watched_path: str | None = None
        self.show_ignored = self.tree.policy.show_ignored
        self.quitting = False

        self._waiting_for_change = False
        self._pending: deque[TreeEvent] = deque()

    def start(self) -> list[Command]:
        self.scanning = True
        return [ScanRoot(root=self.root_path, policy=self.tree.policy)]

    def dispatch(self, msg: Message) -> list[Command]:
        """Apply *msg*, then every tree event it produced, and collect the follow-up commands."""
        commands = self._handle(msg)
        while self._pending:
            commands.extend(self._handle(self._pending.popleft()))
        return commands

    def _emit(self, event: TreeEvent | None) -> None:
        if event is not None:
            self._pending.append(event)

    def _handle(self, msg: Message) -> list[Command]:
        match msg:
            case KeyPressed(key, text):
                return self._on_key(key, text)
            case MouseScrolled(x, delta):
                self._on_wheel(x, delta)
                return []
            case Resized(width, height):
                self.width = width
                self.height = height
                self._apply_geometry()
                return []
            case ScanCompleted(nodes):
                self.scanning = False
                self.tree.set_roots(nodes)
                return []
            case ScanFailed(error):
                self.scanning = False
                logger.error("Scan of %s failed: %s", self.root_path, error)
                self.last_error = str(error)
                return []
            case FileSelected(path):
                self.loading = True
                self.last_error = None
                return [LoadFile(path=path)]
            case DirectoryToggled():
                return []
            case FilterChanged(active, _value):
                self.filter_active = active
                self._apply_geometry()
                return []
            case FileLoaded(path, content):
                self.loading = False
                self.last_error = None
                self.viewport.set_content(content, path)
                if self.viewport.error is not None:
                    self.last_error = self.viewport.error
                    return []
                return [StartWatching(path=path)]
            case FileLoadFailed(path, error):
                self.loading = False
                logger.warning("Could not load %s: %s", path, error)
                self.last_error = error
                self.viewport.set_error(path, error)
                return []
            case WatchStarted(path):
                if self.watched_path is not None and self.watched_path != path:
                    logger.debug("Switched watch from %s to %s", self.watched_path, path)
                self.watched_path = path
                return self._arm_wait()
            case WatchFailed(error):
                logger.warning("Could not watch %s: %s", error.path, error.message)
                self.last_error = str(error)
                return []
            case FileChanged(path):
                self._waiting_for_change = False
                commands: list[Command] = []
                if path == self.watched_path:
                    commands.append(LoadFile(path=path))
                else:
                    logger.debug("Ignoring change for %s; watching %s", path, self.watched_path)
                return commands + self._arm_wait()
            case WatchErrored(error):
                self._waiting_for_change = False
                logger.warning("Watcher reported: %s", error)
                self.last_error = str(error)
                return self._arm_wait()
            case _:
                assert_never(msg)

    def _arm_wait(self) -> list[Command]:
        if self._waiting_for_change or self.quitting:
            return []
        self._waiting_for_change = True
        return [WaitForChange()]

    def _quit(self) -> list[Command]:
        self.quitting = True
        return [Quit()]

    # -- geometry ----------------------------------------------------------

    @property
    def tree_width(self) -> int:
        tree, _ = panel_widths(
            self.width, self.config.tree_ratio, self.config.min_tree_width, self.config.min_preview_width
        )
        return tree

    @property
    def preview_width(self) -> int:
        _, preview = panel_widths(
            self.width, self.config.tree_ratio, self.config.min_tree_width, self.config.min_preview_width
        )
        return preview

    @property
    def shows_filter_prompt(self) -> bool:
        return self.filter_active or self.tree.has_active_filter

    def _apply_geometry(self) -> None:
        if self.width <= 0 or self.height <= 0:
            return
        if self.fullscreen:
            self.viewport.set_size(self.width - 2, fullscreen_content_height(self.height))
            return
        tree_w, preview_w = panel_widths(
            self.width, self.config.tree_ratio, self.config.min_tree_width, self.config.min_preview_width
        )
        body = content_height(self.height)
        tree_rows = body - FILTER_PROMPT_HEIGHT if self.shows_filter_prompt else body
        self.tree.set_size(tree_w - 2, max(1, tree_rows))
        self.viewport.set_size(preview_w - 2, body)

    def _toggle_fullscreen(self) -> None:
        self.fullscreen = not self.fullscreen
        if self.fullscreen:
            self.focused_panel = Panel.PREVIEW
        self._apply_geometry()

    # -- input -------------------------------------------------------------

    def _on_key(self, key: str, text: str) -> list[Command]:
        if key == "ctrl+c":
            return self._quit()

        match self.mode:
            case Mode.HELP_VISIBLE:
                if key in HELP_DISMISS_KEYS:
                    self.mode = Mode.NAVIGATING
                return []
            case Mode.TREE_FILTERING:
                self._filter_key(key, text)
                return []
            case Mode.PREVIEW_SEARCH_INPUT:
                self._search_key(key, text)
                return []
            case Mode.NAVIGATING:
                pass

        if key == "q":
            return self._quit()
        if key == "?":
            self.mode = Mode.HELP_VISIBLE
            return []
        if key == "tab":
            if not self.fullscreen:
                self.focused_panel = Panel.PREVIEW if self.focused_panel is Panel.TREE else Panel.TREE
            return []
        if key == "f":
            self._toggle_fullscreen()
            return []
        if key == "esc" and self.fullscreen and not self.viewport.has_active_search:
            self._toggle_fullscreen()
            return []

        if self.fullscreen or self.focused_panel is Panel.PREVIEW:
            self._preview_key(key)
            return []
        return self._tree_key(key)

    def _page_step(self, height: int) -> int:
        return self.config.scroll_step or max(1, height // 2)

    def _tree_key(self, key: str) -> list[Command]:
        tree = self.tree
        match key:
            case "up" | "k":
                tree.move_selection(-1)
            case "down" | "j":
                tree.move_selection(1)
            case "pgup" | "ctrl+u":
                tree.move_selection(-self._page_step(tree.height))
            case "pgdown" | "ctrl+d":
                tree.move_selection(self._page_step(tree.height))
            case "g" | "home":
                tree.move_to_top()
            case "G" | "end":
                tree.move_to_bottom()
            case "enter":
                self._emit(tree.activate())
            case "l" | "right":
                self._emit(tree.expand_selected())
            case "h" | "left":
                self._emit(tree.collapse_or_parent())
            case "/":
                self.mode = Mode.TREE_FILTERING
                self._emit(tree.set_filter(""))
            case "esc":
                if tree.has_active_filter:
                    self._emit(tree.clear_filter())
            case "i":
                return self._toggle_ignored()
        return []

    def _toggle_ignored(self) -> list[Command]:
        self.show_ignored = not self.show_ignored
        policy = self.tree.policy.with_show_ignored(self.show_ignored)
        self.tree.set_policy(policy)
        self.scanning = True
        logger.info("Rescanning %s (show ignored: %s)", self.root_path, self.show_ignored)
        return [ScanRoot(root=self.root_path, policy=policy)]

    def _filter_key(self, key: str, text: str) -> None:
        tree = self.tree
        if key == "esc":
            self.mode = Mode.NAVIGATING
            self._emit(tree.clear_filter())
        elif key == "enter":
            self.mode = Mode.NAVIGATING
            if tree.filter_text:
                self._emit(FilterChanged(active=False, value=tree.filter_text))
            else:
                self._emit(tree.clear_filter())
        elif key == "backspace":
            self._emit(tree.set_filter(tree.filter_text[:-1]))
        elif key in ("up", "down"):
            tree.move_selection(-1 if key == "up" else 1)
        elif _printable(text):
            self._emit(tree.set_filter(tree.filter_text + text))

    def _preview_key(self, key: str) -> None:
        viewport = self.viewport
        match key:
            case "up" | "k":
                viewport.line_up()
            case "down" | "j":
                viewport.line_down()
            case "pgup" | "ctrl+u":
                if self.config.scroll_step:
                    viewport.line_up(self.config.scroll_step)
                else:
                    viewport.half_page_up()
            case "pgdown" | "ctrl+d":
                if self.config.scroll_step:
                    viewport.line_down(self.config.scroll_step)
                else:
                    viewport.half_page_down()
            case "g" | "home":
                viewport.goto_top()
            case "G" | "end":
                viewport.goto_bottom()
            case "/":
                self.mode = Mode.PREVIEW_SEARCH_INPUT
                viewport.begin_search_input()
            case "n":
                viewport.next_match()
            case "N":
                viewport.previous_match()
            case "esc":
                if viewport.search_query:
                    viewport.clear_search()

    def _search_key(self, key: str, text: str) -> None:
        viewport = self.viewport
        if key == "esc":
            self.mode = Mode.NAVIGATING
            viewport.cancel_search_input()
        elif key == "enter":
            self.mode = Mode.NAVIGATING
            viewport.commit_search_input()
        elif key == "backspace":
            viewport.search_input_backspace()
        elif _printable(text):
            viewport.search_input_append(text)

    def _on_wheel(self, x: int, delta: int) -> None:
        if self.mode is not Mode.NAVIGATING or delta == 0:
            return
        if not self.fullscreen and x < self.tree_width + 2:
            self.tree.move_selection(delta)
            return
        self.viewport.line_down(delta * WHEEL_LINES)
