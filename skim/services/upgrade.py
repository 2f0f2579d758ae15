from __future__ import annotations

import subprocess
import sys
from typing import Callable

from result import Err, Ok, Result

DIST_NAME = "skim-md"

Runner = Callable[..., subprocess.CompletedProcess[str]]


def upgrade_command(check_only: bool = False, force: bool = False) -> list[str]:
    cmd = [sys.executable, "-m", "pip", "install", "--upgrade", DIST_NAME]
    if check_only:
        cmd.append("--dry-run")
    if force:
        cmd.append("--force-reinstall")
    return cmd


def run_upgrade(
    current_version: str,
    check_only: bool = False,
    force: bool = False,
    runner: Runner = subprocess.run,
) -> Result[str, str]:
    cmd = upgrade_command(check_only=check_only, force=force)
    try:
        proc = runner(cmd, capture_output=True, text=True, check=False)  # noqa: S603
    except OSError as exc:
        return Err(f"Could not run pip: {exc}")

    if proc.returncode != 0:
        detail = (proc.stderr or proc.stdout or "").strip().splitlines()
        return Err(detail[-1] if detail else f"pip exited with status {proc.returncode}")

    if check_only:
        would_install = [line for line in proc.stdout.splitlines() if line.startswith("Would install")]
        if would_install:
            return Ok(f"Current version: {current_version}\n{would_install[-1]}\nRun 'skim upgrade' to install it.")
        return Ok(f"Current version: {current_version}\nYou're already on the latest version.")
    return Ok(f"Upgraded {DIST_NAME} (was {current_version}).")
