"""All-or-nothing application of file edits, with rollback on failure."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from .preview import ChangeType, ImportChange, PreviewChange, PreviewDiff, RefactoringSummary

PathLike = Union[str, Path]

_SEPARATOR = "========================================\n"


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


def _lines(text: str) -> list[str]:
    """Split text into lines, dropping one trailing newline and any '\\r' endings."""
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


class TransactionError(Exception):
    """Raised when a transaction cannot be built, committed or rolled back."""


class TransactionMode(enum.Enum):
    """Whether a transaction writes files or only simulates the writes."""

    EXECUTE = "execute"
    DRY_RUN = "dry_run"


@dataclass
class FileOperation:
    """One file write, with the content to restore on rollback."""

    path: Path
    original_content: str
    new_content: str
    applied: bool = False

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def apply(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8", newline="") as handle:
            handle.write(self.new_content)

    def restore(self) -> None:
        with open(self.path, "w", encoding="utf-8", newline="") as handle:
            handle.write(self.original_content)


@dataclass
class TransactionResult:
    """Outcome of committing a transaction."""

    mode: TransactionMode
    total_operations: int
    successful_operations: int = 0
    failed_operations: int = 0
    files_modified: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def is_success(self) -> bool:
        return self.failed_operations == 0

    def format_summary(self) -> str:
        """Return the result formatted for display."""
        parts = [_SEPARATOR]
        if self.mode is TransactionMode.DRY_RUN:
            parts.append("       DRY-RUN TRANSACTION RESULT\n")
        else:
            parts.append("         TRANSACTION RESULT\n")
        parts.append(_SEPARATOR + "\n")

        if self.is_success():
            parts.append("✅ Transaction completed successfully\n\n")
        else:
            parts.append("❌ Transaction failed and was rolled back\n\n")

        parts.append(
            f"📊 {self.total_operations} total operation{_plural(self.total_operations)}\n"
        )
        parts.append(f"✅ {self.successful_operations} successful\n")
        if self.failed_operations > 0:
            parts.append(f"❌ {self.failed_operations} failed\n")

        if self.files_modified:
            count = len(self.files_modified)
            parts.append(f"\n📝 {count} file{_plural(count)} modified:\n")
            parts.extend(f"   {path}\n" for path in self.files_modified)

        if self.errors:
            parts.append("\n⚠️  Errors:\n")
            parts.extend(f"   {error}\n" for error in self.errors)

        parts.append("\n" + _SEPARATOR)
        return "".join(parts)


class RefactoringTransaction:
    """A set of file writes applied together or not at all."""

    def __init__(self, mode: TransactionMode) -> None:
        self.mode = mode
        self._operations: list[FileOperation] = []
        self._backup: dict[Path, str] = {}
        self._committed = False

    @property
    def operations(self) -> tuple[FileOperation, ...]:
        return tuple(self._operations)

    @property
    def is_committed(self) -> bool:
        return self._committed

    def add_operation(self, path: PathLike, original_content: str, new_content: str) -> None:
        """Queue a write of `new_content` to `path`."""
        if self._committed:
            raise TransactionError("Cannot add operations to a committed transaction")
        path = Path(path)
        self._backup.setdefault(path, original_content)
        self._operations.append(FileOperation(path, original_content, new_content))

    def add_file_change(self, path: PathLike, new_content: str) -> None:
        """Queue a write, taking the original content from the file if it exists."""
        path = Path(path)
        if path.exists():
            try:
                original_content = path.read_text(encoding="utf-8")
            except OSError as exc:
                raise TransactionError(f"Failed to read file: {path}") from exc
        else:
            original_content = ""
        self.add_operation(path, original_content, new_content)

    def commit(self) -> TransactionResult:
        """Apply every operation; on the first failure roll back and raise."""
        if self._committed:
            raise TransactionError("Transaction has already been committed")

        result = TransactionResult(mode=self.mode, total_operations=len(self._operations))

        if self.mode is TransactionMode.DRY_RUN:
            result.successful_operations = len(self._operations)
            result.files_modified = [op.path for op in self._operations]
            self._committed = True
            return result

        for operation in self._operations:
            try:
                operation.apply()
            except OSError as exc:
                result.failed_operations += 1
                result.errors.append(f"{operation.path}: {exc}")
                try:
                    self.rollback()
                except TransactionError as rollback_exc:
                    result.errors.append(
                        f"CRITICAL: Rollback failed: {rollback_exc}. "
                        "Manual recovery may be required."
                    )
                else:
                    result.errors.append("Transaction rolled back successfully")
                raise TransactionError(
                    f"Transaction failed: {exc}. All changes have been rolled back."
                ) from exc
            operation.applied = True
            result.successful_operations += 1
            result.files_modified.append(operation.path)

        self._committed = True
        return result

    def rollback(self) -> None:
        """Restore the original content of every applied operation, newest first."""
        errors = []
        for operation in reversed(self._operations):
            if not operation.applied:
                continue
            try:
                operation.restore()
            except OSError as exc:
                errors.append(f"{operation.path}: {exc}")
        if errors:
            raise TransactionError(f"Rollback encountered errors: {'; '.join(errors)}")

    def preview(self) -> RefactoringSummary:
        """Summarise the queued operations as a line-by-line preview."""
        file_changes = []
        for operation in self._operations:
            diff = PreviewDiff(operation.path)
            old_lines = _lines(operation.original_content)
            new_lines = _lines(operation.new_content)

            for line_num, (old, new) in enumerate(zip(old_lines, new_lines), start=1):
                if old != new:
                    diff.add_change(PreviewChange(line_num, 1, old, new, new))

            for line_num, new in enumerate(new_lines[len(old_lines):], start=len(old_lines) + 1):
                diff.add_change(PreviewChange(line_num, 1, "", new, new))

            if ("import " in operation.new_content) != ("import " in operation.original_content):
                diff.add_import_change(
                    ImportChange(
                        change_type=ChangeType.OTHER,
                        source="detected",
                        symbols=[],
                        line=1,
                    )
                )
            file_changes.append(diff)
        return RefactoringSummary(file_changes)