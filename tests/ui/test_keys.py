from __future__ import annotations

import pytest
from textual import events

from skim.config.defaults import default_config
from skim.models.enums import Mode
from skim.services.scanner import scan_directory
from skim.session.controller import SessionController
from skim.session.messages import ScanCompleted
from skim.ui.app import SkimApp, key_from_textual
from tests.fs_mock import MemoryFileSystem


@pytest.mark.parametrize(
    ("key", "character", "expected"),
    [
        ("escape", "\x1b", "esc"),
        ("pageup", None, "pgup"),
        ("pagedown", None, "pgdown"),
        ("question_mark", "?", "?"),
        ("slash", "/", "/"),
        ("G", "G", "G"),
        ("shift+g", "G", "G"),
        ("j", "j", "j"),
        ("enter", "\r", "enter"),
        ("tab", "\t", "tab"),
        ("backspace", "\x7f", "backspace"),
        ("ctrl+c", "\x03", "ctrl+c"),
        ("up", None, "up"),
    ],
)
def test_key_from_textual(key: str, character: str | None, expected: str) -> None:
    assert key_from_textual(key, character) == expected


class _IdleWatcher:
    def close(self) -> None:
        pass


def test_key_events_reach_the_controller() -> None:
    fs = MemoryFileSystem().add_file("/root/a.md").add_file("/root/b.md")
    controller = SessionController("/root", default_config(), fs)
    controller.dispatch(ScanCompleted(nodes=scan_directory("/root", controller.tree.policy, fs).unwrap()))
    app = SkimApp(controller, _IdleWatcher(), fs)  # type: ignore[arg-type]

    app.on_key(events.Key("j", "j"))
    assert controller.tree.selected_node is not None
    assert controller.tree.selected_node.name == "b.md"

    app.on_key(events.Key("question_mark", "?"))
    assert controller.mode is Mode.HELP_VISIBLE
