"""Data model shared by the language-specific import analyzers."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

PathLike = Union[str, Path]


@dataclass(frozen=True)
class ImportLocation:
    """Position of an import in a file: 1-based lines, 0-based columns."""

    line: int
    column: int
    end_line: int
    end_column: int


class ImportKind(enum.Enum):
    """Kind of import statement."""

    NAMED = "Named"
    DEFAULT = "Default"
    NAMESPACE = "Namespace"
    SIDE_EFFECT = "SideEffect"
    REQUIRE = "Require"
    FROM_IMPORT = "FromImport"
    SIMPLE_IMPORT = "SimpleImport"
    USE = "Use"
    INCLUDE = "Include"


@dataclass
class ImportStatement:
    """A single import statement found in, or to be added to, a file."""

    source: str
    symbols: list[str]
    location: ImportLocation
    kind: ImportKind
    alias: Optional[str] = None


class ImportChangeKind(enum.Enum):
    """Type of change made to an import."""

    ADD = "Add"
    REMOVE = "Remove"
    MODIFY = "Modify"


@dataclass
class ImportChange:
    """A change to one import statement."""

    kind: ImportChangeKind
    statement: ImportStatement


@dataclass
class _Lines:
    """Lines of a text, split the way line iteration over source text works."""

    items: list[str] = field(default_factory=list)

    @classmethod
    def of(cls, text: str) -> "_Lines":
        if not text:
            return cls([])
        parts = text.split("\n")
        if parts[-1] == "":
            parts.pop()
        return cls([p[:-1] if p.endswith("\r") else p for p in parts])


class ImportAnalyzer(ABC):
    """Finds and edits the imports of source files in one language."""

    @abstractmethod
    def find_imports(self, file: PathLike) -> list[ImportStatement]:
        """Return all imports in the file."""

    @abstractmethod
    def add_import(self, file: PathLike, statement: ImportStatement) -> str:
        """Return the file content with the import added."""

    @abstractmethod
    def remove_import(self, file: PathLike, symbol: str) -> str:
        """Return the file content with imports of the symbol removed."""

    @abstractmethod
    def update_import_path(self, file: PathLike, old_path: str, new_path: str) -> str:
        """Return the file content with the import source path changed."""

    @staticmethod
    def _read_source(file: PathLike) -> str:
        return Path(file).read_text(encoding="utf-8")

    @staticmethod
    def _split_lines(text: str) -> list[str]:
        return _Lines.of(text).items

    @classmethod
    def _insert_after_last_import(
        cls, content: str, imports: list[ImportStatement], text: str
    ) -> str:
        if imports:
            end_line = imports[-1].location.end_line
            position = sum(len(line) + 1 for line in cls._split_lines(content)[:end_line])
        else:
            position = 0
        return content[:position] + text + content[position:]

    @classmethod
    def _drop_import_lines(cls, content: str, imports: Iterable[ImportStatement]) -> str:
        lines = cls._split_lines(content)
        for statement in imports:
            for line_num in range(statement.location.line, statement.location.end_line + 1):
                if 0 < line_num <= len(lines):
                    lines[line_num - 1] = ""
        return "\n".join(line for line in lines if line) + "\n"