from __future__ import annotations

import logging
from typing_extensions import override

from textual import events
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Static

from skim.models.enums import Panel
from skim.services.fs import DEFAULT_FS, FileSystem
from skim.services.watcher import FileWatcher
from skim.session.controller import SessionController
from skim.session.effects import perform
from skim.session.messages import Command, KeyPressed, Message, MouseScrolled, Quit, Resized
from skim.session.render import render_frame

logger = logging.getLogger(__name__)

_KEY_ALIASES: dict[str, str] = {
    "escape": "esc",
    "pageup": "pgup",
    "pagedown": "pgdown",
    "shift+g": "G",
    "shift+n": "N",
}


def key_from_textual(key: str, character: str | None) -> str:
    """Map a textual key event onto the session's canonical key names."""
    if key in _KEY_ALIASES:
        return _KEY_ALIASES[key]
    if character and len(character) == 1 and character.isprintable():
        return character
    return key


class SkimApp(App[None]):
    CSS_PATH = "app.tcss"
    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        controller: SessionController,
        watcher: FileWatcher,
        fs: FileSystem = DEFAULT_FS,
    ) -> None:
        super().__init__()
        self.controller = controller
        self.watcher = watcher
        self._fs = fs
        self._ready = False

    @override
    def compose(self) -> ComposeResult:
        yield Container(
            Static(id="header"),
            Horizontal(
                Static(id="tree-panel"),
                Static(id="preview-panel"),
                id="body",
            ),
            Static(id="status-row"),
            id="app-grid",
        )
        yield Static(id="help-box")

    def on_mount(self) -> None:
        self._ready = True
        self._dispatch(Resized(width=self.size.width, height=self.size.height))
        self._run_commands(self.controller.start())

    def on_unmount(self) -> None:
        self.watcher.close()

    def on_resize(self, event: events.Resize) -> None:
        self._dispatch(Resized(width=event.size.width, height=event.size.height))

    def on_key(self, event: events.Key) -> None:
        key = key_from_textual(event.key, event.character)
        text = event.character if event.character and event.character.isprintable() else ""
        event.stop()
        self._dispatch(KeyPressed(key=key, text=text))

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        self._dispatch(MouseScrolled(x=event.screen_x, delta=1))

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        self._dispatch(MouseScrolled(x=event.screen_x, delta=-1))

    # -- dispatch loop -----------------------------------------------------

    def _dispatch(self, msg: Message) -> None:
        self._run_commands(self.controller.dispatch(msg))
        self._paint()

    def _run_commands(self, commands: list[Command]) -> None:
        for command in commands:
            if isinstance(command, Quit):
                perform(command, self.watcher, self._fs)
                self.exit()
                return
            self.run_worker(
                lambda command=command: self._perform_in_thread(command),
                name=type(command).__name__,
                group="effects",
                thread=True,
                exit_on_error=False,
            )

    def _perform_in_thread(self, command: Command) -> None:
        logger.debug("Running %s", command)
        msg = perform(command, self.watcher, self._fs)
        if msg is None or self.controller.quitting or not self.is_running:
            return
        self.call_from_thread(self._dispatch, msg)

    # -- painting ----------------------------------------------------------

    def _paint(self) -> None:
        if not self._ready:
            return
        frame = render_frame(self.controller)

        header = self.query_one("#header", Static)
        tree_panel = self.query_one("#tree-panel", Static)
        preview_panel = self.query_one("#preview-panel", Static)
        help_box = self.query_one("#help-box", Static)

        header.display = not frame.fullscreen
        header.update(frame.header)
        self.query_one("#body", Horizontal).set_class(frame.fullscreen, "fullscreen")

        tree_panel.display = not frame.fullscreen
        tree_panel.styles.width = frame.tree_width + 2
        tree_panel.styles.height = frame.body_height + 2
        tree_panel.set_class(frame.focused is Panel.TREE and not frame.fullscreen, "focused")
        tree_panel.update(frame.tree)

        preview_panel.styles.width = self.size.width if frame.fullscreen else frame.preview_width + 2
        preview_panel.styles.height = frame.body_height + 2
        preview_panel.set_class(frame.focused is Panel.PREVIEW, "focused")
        preview_panel.update(frame.preview)

        self.query_one("#status-row", Static).update(frame.status)

        help_box.display = frame.help is not None
        if frame.help is not None:
            help_box.update(frame.help)
