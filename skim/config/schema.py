from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from skim.models.tree import DEFAULT_EXTENSIONS, ScanPolicy


@dataclass(slots=True)
class AppConfig:
    show_hidden: bool = False
    markdown_only: bool = True
    max_depth: int = -1
    ignore_dirs: list[str] = field(default_factory=list)
    markdown_extensions: list[str] = field(default_factory=lambda: sorted(DEFAULT_EXTENSIONS))
    tree_ratio: float = 0.25
    min_tree_width: int = 20
    min_preview_width: int = 30
    debounce_ms: int = 100
    scroll_step: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "showHidden": self.show_hidden,
            "markdownOnly": self.markdown_only,
            "maxDepth": self.max_depth,
            "ignoreDirs": self.ignore_dirs,
            "markdownExtensions": self.markdown_extensions,
            "treeRatio": self.tree_ratio,
            "minTreeWidth": self.min_tree_width,
            "minPreviewWidth": self.min_preview_width,
            "debounceMs": self.debounce_ms,
            "scrollStep": self.scroll_step,
        }

    def scan_policy(self) -> ScanPolicy:
        return ScanPolicy(
            show_hidden=self.show_hidden,
            markdown_only=self.markdown_only,
            max_depth=self.max_depth,
            ignore_names=frozenset(self.ignore_dirs),
            show_ignored=False,
            extensions=frozenset(_normalize_extension(ext) for ext in self.markdown_extensions),
        )


def _normalize_extension(ext: str) -> str:
    ext = ext.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"


def from_dict(data: dict[str, Any], defaults: AppConfig) -> AppConfig:
    max_depth_raw = data.get("maxDepth", defaults.max_depth)
    ratio = float(data.get("treeRatio", defaults.tree_ratio))

    return AppConfig(
        show_hidden=bool(data.get("showHidden", defaults.show_hidden)),
        markdown_only=bool(data.get("markdownOnly", defaults.markdown_only)),
        max_depth=int(max_depth_raw) if max_depth_raw is not None else -1,
        ignore_dirs=[str(x) for x in data.get("ignoreDirs", defaults.ignore_dirs)],
        markdown_extensions=[
            _normalize_extension(str(x)) for x in data.get("markdownExtensions", defaults.markdown_extensions)
        ],
        tree_ratio=min(0.8, max(0.1, ratio)),
        min_tree_width=max(10, int(data.get("minTreeWidth", defaults.min_tree_width))),
        min_preview_width=max(10, int(data.get("minPreviewWidth", defaults.min_preview_width))),
        debounce_ms=max(10, int(data.get("debounceMs", defaults.debounce_ms))),
        scroll_step=max(0, int(data.get("scrollStep", defaults.scroll_step))),
    )
