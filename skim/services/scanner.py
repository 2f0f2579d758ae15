"""Directory listing with Markdown-aware visibility rules.

Every function here is stateless: it reads the filesystem through a
``FileSystem`` and returns fresh ``TreeNode`` objects. Errors reading the
directory being listed are returned as ``ScanError``; errors below it, met
while deciding whether a subdirectory holds anything worth showing, count as
"nothing here" so one unreadable folder never hides its siblings.
"""

from __future__ import annotations

import logging
import posixpath

from result import Err, Ok, Result

from skim.models.enums import NodeKind
from skim.models.tree import ScanError, ScanErrorCode, ScanPolicy, ScanResult, TreeNode
from skim.services.fs import DEFAULT_FS, DirEntry, FileSystem

logger = logging.getLogger(__name__)


def is_relevant_file(name: str, policy: ScanPolicy) -> bool:
    _, ext = posixpath.splitext(name)
    return ext.lower() in policy.extensions


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _skip_entry(entry: DirEntry, policy: ScanPolicy) -> bool:
    if not policy.show_hidden and _is_hidden(entry.name):
        return True
    assert entry.stat is not None
    return entry.stat.is_dir and not policy.show_ignored and entry.name in policy.ignore_names


def _sort_key(node: TreeNode) -> tuple[bool, str]:
    return (not node.is_dir, node.name.lower())


def resolve_root(path: str, fs: FileSystem = DEFAULT_FS) -> str | ScanError:
    """Validate and resolve a scan root path.

    Returns the resolved absolute path, or a ``ScanError`` on failure.
    """
    expanded = fs.expanduser(path)
    if not fs.exists(expanded):
        return ScanError(
            code=ScanErrorCode.NOT_FOUND,
            path=expanded,
            message="Path does not exist",
        )

    resolved = fs.absolute(expanded)
    try:
        root_stat = fs.stat(resolved)
    except OSError as exc:
        return ScanError(
            code=ScanErrorCode.ROOT_STAT_FAILED,
            path=resolved,
            message=f"Cannot stat root: {exc}",
        )
    if not root_stat.is_dir:
        return ScanError(
            code=ScanErrorCode.NOT_DIRECTORY,
            path=resolved,
            message="Path is not a directory",
        )
    return resolved


def contains_relevant_file(dir_path: str, policy: ScanPolicy, fs: FileSystem = DEFAULT_FS) -> bool:
    """Return True as soon as any relevant file is found below *dir_path*."""
    try:
        entries = list(fs.scandir(dir_path))
    except OSError:
        return False

    for entry in entries:
        if entry.stat is None or _skip_entry(entry, policy):
            continue
        if entry.stat.is_dir:
            if contains_relevant_file(entry.path, policy, fs):
                return True
        elif is_relevant_file(entry.name, policy):
            return True
    return False


def scan_level(dir_path: str, depth: int, policy: ScanPolicy, fs: FileSystem = DEFAULT_FS) -> ScanResult:
    try:
        entries = list(fs.scandir(dir_path))
    except OSError as exc:
        return Err(
            ScanError(
                code=ScanErrorCode.READ_FAILED,
                path=dir_path,
                message=f"Cannot read directory ({exc.strerror or exc})",
            )
        )

    nodes: list[TreeNode] = []
    for entry in entries:
        if entry.stat is None or _skip_entry(entry, policy):
            continue
        is_dir = entry.stat.is_dir
        if policy.markdown_only:
            if is_dir and not contains_relevant_file(entry.path, policy, fs):
                continue
            if not is_dir and not is_relevant_file(entry.name, policy):
                continue
        nodes.append(
            TreeNode(
                path=entry.path,
                name=entry.name,
                kind=NodeKind.DIRECTORY if is_dir else NodeKind.FILE,
                depth=depth,
            )
        )

    nodes.sort(key=_sort_key)
    return Ok(nodes)


def scan_directory(root: str, policy: ScanPolicy, fs: FileSystem = DEFAULT_FS) -> ScanResult:
    resolved = resolve_root(root, fs)
    if isinstance(resolved, ScanError):
        return Err(resolved)
    return scan_level(resolved, 0, policy, fs)


def scan_children(node: TreeNode, policy: ScanPolicy, fs: FileSystem = DEFAULT_FS) -> ScanResult:
    if not node.is_dir:
        return Ok([])
    if policy.max_depth >= 0 and node.depth >= policy.max_depth:
        return Ok([])
    return scan_level(node.path, node.depth + 1, policy, fs)


def count_relevant_files(root: str, policy: ScanPolicy, fs: FileSystem = DEFAULT_FS) -> Result[int, ScanError]:
    """Count relevant files under *root* using the same skip rules as the tree.

    Only the root itself must be readable; unreadable subdirectories are skipped.
    """
    try:
        top = list(fs.scandir(root))
    except OSError as exc:
        return Err(ScanError(code=ScanErrorCode.READ_FAILED, path=root, message=f"Cannot read directory ({exc})"))

    count = 0
    stack: list[list[DirEntry]] = [top]
    while stack:
        for entry in stack.pop():
            if entry.stat is None or _skip_entry(entry, policy):
                continue
            if entry.stat.is_dir:
                try:
                    stack.append(list(fs.scandir(entry.path)))
                except OSError:
                    logger.debug("Skipping unreadable directory %s", entry.path)
            elif is_relevant_file(entry.name, policy):
                count += 1
    return Ok(count)
