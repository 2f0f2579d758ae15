from __future__ import annotations

from skim.config.schema import AppConfig
from skim.models.tree import DEFAULT_EXTENSIONS

# Development noise: dependency caches and build output that rarely hold docs.
DEFAULT_IGNORE_DIRS: tuple[str, ...] = (
    "node_modules",
    "vendor",
    "__pycache__",
    ".venv",
    "venv",
    "dist",
    "build",
    "target",
    ".cache",
    ".next",
    ".nuxt",
    "coverage",
    ".terraform",
    ".serverless",
    "bower_components",
)


def default_config() -> AppConfig:
    return AppConfig(
        show_hidden=False,
        markdown_only=True,
        max_depth=-1,
        ignore_dirs=list(DEFAULT_IGNORE_DIRS),
        markdown_extensions=sorted(DEFAULT_EXTENSIONS),
    )
