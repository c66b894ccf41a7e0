"""Renaming a symbol at every place it is referenced."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Union

from .imports.registry import get_analyzer_for_file
from .preview import ChangeType, ImportChange, PreviewChange, PreviewDiff, RefactoringSummary
from .transaction import RefactoringTransaction, TransactionMode, TransactionResult

PathLike = Union[str, Path]


class RenameError(Exception):
    """Raised when a symbol cannot be located or renamed."""


@dataclass
class SymbolLocation:
    """A position in a file; line and column are 1-based."""

    file_path: Path
    line: int
    column: int

    def __post_init__(self) -> None:
        self.file_path = Path(self.file_path)


@dataclass
class SymbolReference:
    """One place where a symbol is used or declared."""

    location: SymbolLocation


class SymbolQuery(Protocol):
    """Source of symbol definitions and references for a project."""

    def find_definition(
        self, file_path: Path, line: int, column: int
    ) -> Optional[SymbolLocation]:
        """Return the definition of the symbol at the position, if any."""

    def find_references(
        self, symbol: str, include_declarations: bool
    ) -> list[SymbolReference]:
        """Return every reference to the named symbol."""


@dataclass
class RenameOptions:
    """What to rename, to what, and how."""

    file_path: Path
    line: int
    column: int
    new_name: str
    update_imports: bool = True
    mode: TransactionMode = TransactionMode.EXECUTE

    def __post_init__(self) -> None:
        self.file_path = Path(self.file_path)


@dataclass
class RenameResult:
    """Outcome of a rename."""

    old_name: str
    new_name: str
    references_updated: int
    files_modified: int
    imports_updated: int
    transaction_result: TransactionResult


def _lines(text: str) -> list[str]:
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _identifier_bounds(line: str, index: int) -> tuple[int, int]:
    start = index
    while start > 0 and _is_ident_char(line[start - 1]):
        start -= 1
    end = index
    while end < len(line) and _is_ident_char(line[end]):
        end += 1
    return start, end


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, ValueError) as exc:
        raise RenameError(f"Failed to read file: {path}") from exc


def _group_by_file(references: Iterable[SymbolReference]) -> dict[Path, list[SymbolReference]]:
    grouped: dict[Path, list[SymbolReference]] = {}
    for reference in references:
        grouped.setdefault(Path(reference.location.file_path), []).append(reference)
    return grouped


class SymbolRenamer:
    """Renames a symbol everywhere the query reports a reference to it."""

    def __init__(self, query: SymbolQuery, project_root: PathLike) -> None:
        self.query = query
        self.project_root = Path(project_root)

    def _resolve(self, options: RenameOptions) -> tuple[str, dict[Path, list[SymbolReference]]]:
        definition = self.query.find_definition(options.file_path, options.line, options.column)
        if definition is None:
            raise RenameError("No symbol found at the specified location")
        old_name = self.extract_symbol_name(definition)
        references = self.query.find_references(old_name, True)
        if not references:
            raise RenameError(f"No references found for symbol '{old_name}'")
        return old_name, _group_by_file(references)

    def rename(self, options: RenameOptions) -> RenameResult:
        """Rename the symbol at the given position and commit the edits."""
        old_name, by_file = self._resolve(options)

        transaction = RefactoringTransaction(options.mode)
        for file_path, file_refs in by_file.items():
            content = _read(file_path)
            new_content = self.replace_symbol_in_file(
                content, file_refs, old_name, options.new_name
            )
            transaction.add_operation(file_path, content, new_content)

        imports_updated = 0
        if options.update_imports:
            imports_updated = self._update_imports_for_rename(
                transaction, old_name, options.new_name, by_file
            )

        transaction_result = transaction.commit()
        return RenameResult(
            old_name=old_name,
            new_name=options.new_name,
            references_updated=sum(len(refs) for refs in by_file.values()),
            files_modified=len(transaction_result.files_modified),
            imports_updated=imports_updated,
            transaction_result=transaction_result,
        )

    def preview(self, options: RenameOptions) -> RefactoringSummary:
        """Describe the rename without changing any file."""
        old_name, by_file = self._resolve(options)

        file_changes = []
        for file_path, file_refs in by_file.items():
            lines = _lines(_read(file_path))
            diff = PreviewDiff(file_path)
            for reference in file_refs:
                line_no = reference.location.line
                line_content = lines[line_no - 1] if 0 < line_no <= len(lines) else ""
                diff.add_change(
                    PreviewChange(
                        line=line_no,
                        column=reference.location.column,
                        original=old_name,
                        replacement=options.new_name,
                        line_content=line_content,
                    )
                )

            if options.update_imports:
                analyzer = get_analyzer_for_file(file_path)
                if analyzer is not None:
                    try:
                        imports = analyzer.find_imports(file_path)
                    except (OSError, ValueError, SyntaxError):
                        imports = []
                    for statement in imports:
                        if old_name in statement.symbols:
                            diff.add_import_change(
                                ImportChange(
                                    change_type=ChangeType.IMPORT_UPDATE,
                                    source=statement.source,
                                    symbols=[old_name, options.new_name],
                                    line=statement.location.line,
                                )
                            )
            file_changes.append(diff)

        return RefactoringSummary(file_changes)

    def extract_symbol_name(self, location: SymbolLocation) -> str:
        """Return the identifier that covers the location in its file."""
        lines = _lines(_read(Path(location.file_path)))
        if not 0 < location.line <= len(lines):
            raise RenameError(f"Line {location.line} not found in file")
        line = lines[location.line - 1]
        index = location.column - 1
        if not 0 <= index < len(line):
            raise RenameError(
                f"Column {location.column} out of bounds in line {location.line}"
            )
        start, end = _identifier_bounds(line, index)
        if start == end:
            raise RenameError("No identifier found at location")
        return line[start:end]

    def replace_symbol_in_file(
        self,
        content: str,
        references: Iterable[SymbolReference],
        old_name: str,
        new_name: str,
    ) -> str:
        """Return the content with each verified reference renamed; lines join with '\\n'."""
        lines = _lines(content)
        ordered = sorted(
            references,
            key=lambda ref: (ref.location.line, ref.location.column),
            reverse=True,
        )
        for reference in ordered:
            line_idx = reference.location.line - 1
            col_idx = reference.location.column - 1
            if not 0 <= line_idx < len(lines) or col_idx < 0:
                continue
            line = lines[line_idx]
            if not self.symbol_at_position(line, col_idx, old_name):
                continue
            start, end = _identifier_bounds(line, col_idx)
            lines[line_idx] = line[:start] + new_name + line[end:]
        return "\n".join(lines)

    def symbol_at_position(self, line: str, col_idx: int, symbol: str) -> bool:
        """Return True if the identifier covering the 0-based column is the symbol."""
        if not 0 <= col_idx < len(line):
            return False
        start, end = _identifier_bounds(line, col_idx)
        return line[start:end] == symbol

    def _update_imports_for_rename(
        self,
        transaction: RefactoringTransaction,
        old_name: str,
        new_name: str,
        by_file: dict[Path, list[SymbolReference]],
    ) -> int:
        imports_updated = 0
        for file_path in by_file:
            analyzer = get_analyzer_for_file(file_path)
            if analyzer is None:
                continue
            imports = analyzer.find_imports(file_path)
            if not any(old_name in statement.symbols for statement in imports):
                continue

            content = _read(file_path)
            new_content = content
            for statement in imports:
                if old_name not in statement.symbols:
                    continue
                lines = _lines(new_content)
                line_no = statement.location.line
                if not 0 < line_no <= len(lines):
                    continue
                old_line = lines[line_no - 1]
                new_line = (
                    old_line.replace(f" {old_name} ", f" {new_name} ")
                    .replace(f"{{{old_name}}}", f"{{{new_name}}}")
                    .replace(f"{{ {old_name} }}", f"{{ {new_name} }}")
                )
                new_content = new_content.replace(old_line, new_line)
                imports_updated += 1

            transaction.add_operation(file_path, content, new_content)
        return imports_updated