"""Import analysis for Python source files."""

from __future__ import annotations

import ast

from .model import (
    ImportAnalyzer,
    ImportKind,
    ImportLocation,
    ImportStatement,
    PathLike,
)


def _location(node: ast.stmt) -> ImportLocation:
    end_line = node.end_lineno if node.end_lineno is not None else node.lineno
    end_column = node.end_col_offset if node.end_col_offset is not None else node.col_offset
    return ImportLocation(
        line=node.lineno,
        column=node.col_offset,
        end_line=end_line,
        end_column=end_column,
    )


class PythonImportAnalyzer(ImportAnalyzer):
    """Finds and edits top-level `import` and `from ... import` statements."""

    def find_imports(self, file: PathLike) -> list[ImportStatement]:
        content = self._read_source(file)
        try:
            module = ast.parse(content, "<string>")
        except SyntaxError as exc:
            raise ValueError(f"Failed to parse Python file: {file}") from exc

        imports: list[ImportStatement] = []
        for stmt in module.body:
            if isinstance(stmt, ast.Import):
                location = _location(stmt)
                imports.extend(
                    ImportStatement(
                        source=alias.name,
                        symbols=[alias.name],
                        location=location,
                        kind=ImportKind.SIMPLE_IMPORT,
                        alias=alias.asname,
                    )
                    for alias in stmt.names
                )
            elif isinstance(stmt, ast.ImportFrom):
                symbols = [alias.name for alias in stmt.names]
                imports.append(
                    ImportStatement(
                        source=stmt.module if stmt.module is not None else ".",
                        symbols=symbols,
                        location=_location(stmt),
                        kind=ImportKind.NAMESPACE if "*" in symbols else ImportKind.FROM_IMPORT,
                    )
                )
        return imports

    def add_import(self, file: PathLike, statement: ImportStatement) -> str:
        content = self._read_source(file)
        if statement.kind is ImportKind.SIMPLE_IMPORT:
            if statement.alias is not None:
                import_line = f"import {statement.source} as {statement.alias}\n"
            else:
                import_line = f"import {statement.source}\n"
        elif statement.kind is ImportKind.FROM_IMPORT:
            import_line = f"from {statement.source} import {', '.join(statement.symbols)}\n"
        elif statement.kind is ImportKind.NAMESPACE:
            import_line = f"from {statement.source} import *\n"
        else:
            raise ValueError(f"Unsupported import kind for Python: {statement.kind.value}")
        return self._insert_after_last_import(content, self.find_imports(file), import_line)

    def remove_import(self, file: PathLike, symbol: str) -> str:
        content = self._read_source(file)
        matching = [
            s for s in self.find_imports(file) if symbol in s.symbols or s.source == symbol
        ]
        return self._drop_import_lines(content, matching)

    def update_import_path(self, file: PathLike, old_path: str, new_path: str) -> str:
        content = self._read_source(file)
        lines = self._split_lines(content)
        new_content = content
        for statement in self.find_imports(file):
            if statement.source != old_path:
                continue
            old_line = lines[statement.location.line - 1]
            new_content = new_content.replace(old_line, old_line.replace(old_path, new_path))
        return new_content