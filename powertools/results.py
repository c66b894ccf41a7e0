"""Outcome of a batch replacement run."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class BatchResult:
    """Counts, modified files and errors of a batch operation."""

    files_scanned: int = 0
    files_matched: int = 0
    replacements_made: int = 0
    files_modified: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def add_modified_file(self, path: Path, num_replacements: int) -> None:
        self.files_matched += 1
        self.replacements_made += num_replacements
        if num_replacements > 0:
            self.files_modified.append(path)

    def add_error(self, error: str) -> None:
        self.errors.append(error)