"""Path filters used when watching a project for source changes."""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Optional, Union

_IGNORE_PATTERNS = (
    ".git/",
    "target/",
    "node_modules/",
    ".scip",
    "dist/",
    "build/",
    ".next/",
    "__pycache__/",
    ".pytest_cache/",
    ".mypy_cache/",
    "venv/",
    ".venv/",
    ".idea/",
    ".vscode/",
    ".DS_Store",
)


class Language(enum.Enum):
    """Source languages recognised by extension."""

    RUST = "Rust"
    TYPESCRIPT = "TypeScript"
    JAVASCRIPT = "JavaScript"
    PYTHON = "Python"
    CPP = "Cpp"
    C = "C"


_EXTENSIONS = {
    "rs": Language.RUST,
    **dict.fromkeys(("ts", "tsx"), Language.TYPESCRIPT),
    **dict.fromkeys(("js", "jsx"), Language.JAVASCRIPT),
    **dict.fromkeys(("py", "pyi"), Language.PYTHON),
    **dict.fromkeys(("cpp", "cc", "cxx", "hpp", "hxx", "h"), Language.CPP),
    "c": Language.C,
}


def should_ignore(path: Union[str, Path]) -> bool:
    """Return True if the path lies in a build, cache or tool directory."""
    text = str(path)
    return any(pattern in text for pattern in _IGNORE_PATTERNS)


def detect_language_from_path(path: Union[str, Path]) -> Optional[Language]:
    """Return the language for the path's extension, or None."""
    suffix = Path(path).suffix
    return _EXTENSIONS.get(suffix[1:]) if suffix else None


def is_relevant_file(path: Union[str, Path]) -> bool:
    """Return True for source files that are not ignored."""
    return not should_ignore(path) and detect_language_from_path(path) is not None