from __future__ import annotations

import logging
import os
import sys
from dataclasses import replace
from typing import Annotated

import typer
from result import Err
from rich.console import Console
from rich.markup import escape

from skim import __version__
from skim.config.defaults import default_config
from skim.config.loader import load_config, sample_config_json
from skim.models.tree import ScanError, ScanErrorCode
from skim.services.fs import DEFAULT_FS, FileSystem
from skim.services.scanner import count_relevant_files, resolve_root
from skim.services.upgrade import run_upgrade
from skim.services.watcher import FileWatcher
from skim.session.controller import SessionController
from skim.ui.app import SkimApp

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

LOG_ENV = "SKIM_LOG"

USAGE = """\
skim - A terminal markdown viewer

Usage:
  skim [path]          Open skim in the specified directory (default: current directory)
  skim version         Print version information
  skim upgrade         Upgrade skim to the latest version (--check, --force)
  skim help            Show this help message

Options:
  --show-hidden        Include hidden files and directories
  --all-files          Show every file, not only Markdown
  --max-depth N        Limit how deep directories can be expanded
  --sample-config      Print sample config JSON
  --log-file PATH      Write debug logs to PATH (or set SKIM_LOG)
  -v, --version        Print version information

Navigation:
  ↑/k, ↓/j             Move selection up/down
  Enter                Open file or toggle directory
  Tab                  Switch focus between panels
  /                    Filter files (file tree) or search (preview)
  n/N                  Next/previous search match
  f                    Toggle fullscreen preview
  i                    Toggle ignored directories
  ?                    Show help overlay
  q, Ctrl+C            Quit

Version: {version}
"""

_PATH_MESSAGES: dict[ScanErrorCode, str] = {
    ScanErrorCode.NOT_FOUND: "Path does not exist",
    ScanErrorCode.NOT_DIRECTORY: "Path is not a directory",
    ScanErrorCode.ROOT_STAT_FAILED: "Error accessing path",
}


def configure_logging(log_file: str | None) -> None:
    target = log_file or os.environ.get(LOG_ENV)
    if not target:
        logging.getLogger("skim").addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=os.path.expanduser(target),
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _print_version() -> None:
    console.print(f"skim {__version__}", markup=False, highlight=False)


def _version_callback(value: bool) -> None:
    if value:
        _print_version()
        raise typer.Exit(0)


def _upgrade(check: bool, force: bool) -> None:
    if check and force:
        err_console.print("[red]Error: --check and --force cannot be combined.[/]")
        raise typer.Exit(1)
    action = "Checking for updates" if check else "Upgrading skim"
    with console.status(f"[bold #8abeb7]{action}...[/]"):
        result = run_upgrade(__version__, check_only=check, force=force)
    if isinstance(result, Err):
        err_console.print(f"[red]Error: {escape(result.unwrap_err())}[/]")
        raise typer.Exit(1)
    console.print(result.unwrap(), markup=False, highlight=False)


def _report_path_error(error: ScanError) -> None:
    label = _PATH_MESSAGES.get(error.code, error.message)
    err_console.print(f"[red]{label}: {escape(error.path)}[/]")


def open_session(root: str, fs: FileSystem = DEFAULT_FS, **overrides: object) -> None:
    config_result = load_config(fs=fs)
    if isinstance(config_result, Err):
        console.print(f"[yellow]{escape(config_result.unwrap_err())} Using defaults.[/]")
        config = default_config()
    else:
        config = config_result.unwrap()
    if overrides:
        config = replace(config, **overrides)

    counted = count_relevant_files(root, config.scan_policy(), fs)
    if isinstance(counted, Err):
        logger.warning("Could not count files under %s: %s", root, counted.unwrap_err())
    else:
        logger.info("Opening %s (%d relevant files)", root, counted.unwrap())

    watcher = FileWatcher(debounce=config.debounce_ms / 1000)
    try:
        SkimApp(SessionController(root, config, fs), watcher, fs).run(mouse=True)
    finally:
        watcher.close()


def run(
    path: Annotated[str, typer.Argument(help="Directory to browse, or one of: version, help, upgrade.")] = ".",
    check: Annotated[bool, typer.Option("--check", help="With 'upgrade': only report available updates.")] = False,
    force: Annotated[bool, typer.Option("--force", help="With 'upgrade': reinstall even if up to date.")] = False,
    show_hidden: Annotated[bool, typer.Option("--show-hidden", help="Include hidden files and directories.")] = False,
    all_files: Annotated[bool, typer.Option("--all-files", help="Show every file, not only Markdown.")] = False,
    max_depth: Annotated[int | None, typer.Option("--max-depth", help="Max directory depth to expand.")] = None,
    sample_config: Annotated[bool, typer.Option("--sample-config", help="Print sample config JSON.")] = False,
    log_file: Annotated[str | None, typer.Option("--log-file", help="Write debug logs to this file.")] = None,
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Print version information.", callback=_version_callback, is_eager=True),
    ] = False,
) -> None:
    if path == "version":
        _print_version()
        raise typer.Exit(0)
    if path == "help":
        console.print(USAGE.format(version=__version__), markup=False, highlight=False)
        raise typer.Exit(0)

    configure_logging(log_file)

    if path == "upgrade":
        _upgrade(check, force)
        raise typer.Exit(0)

    if sys.platform == "win32":
        console.print("[red]Windows support is not implemented yet.[/]")
        raise typer.Exit(1)

    if sample_config:
        console.print(sample_config_json(), markup=False, highlight=False)
        raise typer.Exit(0)

    resolved = resolve_root(path, DEFAULT_FS)
    if isinstance(resolved, ScanError):
        _report_path_error(resolved)
        raise typer.Exit(1)

    overrides: dict[str, object] = {}
    if show_hidden:
        overrides["show_hidden"] = True
    if all_files:
        overrides["markdown_only"] = False
    if max_depth is not None:
        overrides["max_depth"] = max(0, max_depth)

    try:
        open_session(resolved, **overrides)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Session crashed")
        err_console.print(f"[red]Error running program: {escape(str(exc))}[/]")
        raise typer.Exit(1) from exc


def cli() -> None:
    typer.run(run)


if __name__ == "__main__":
    cli()
