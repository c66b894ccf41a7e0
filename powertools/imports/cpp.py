"""Import analysis for C and C++ `#include` directives."""

from __future__ import annotations

import re
from typing import Iterator

from .model import (
    ImportAnalyzer,
    ImportKind,
    ImportLocation,
    ImportStatement,
    PathLike,
)

_INCLUDE_RE = re.compile(r'[ \t]*(#[ \t]*include[ \t]*)(<[^>\n]*>|"[^"\n]*")')


class CppImportAnalyzer(ImportAnalyzer):
    """Finds and edits `#include` directives."""

    def _scan(self, content: str) -> Iterator[ImportStatement]:
        in_comment = False
        for row, line in enumerate(self._split_lines(content), start=1):
            start = 0
            if in_comment:
                close = line.find("*/")
                if close < 0:
                    continue
                in_comment = False
                start = close + 2
            match = _INCLUDE_RE.match(line, start)
            if match:
                yield ImportStatement(
                    source=match.group(2).strip('<>"'),
                    symbols=[],
                    location=ImportLocation(
                        line=row,
                        column=match.start(1),
                        end_line=row,
                        end_column=match.end(),
                    ),
                    kind=ImportKind.INCLUDE,
                )
            code = line[start:]
            line_comment = code.find("//")
            if line_comment >= 0:
                code = code[:line_comment]
            if code.rfind("/*") > code.rfind("*/"):
                in_comment = True

    def find_imports(self, file: PathLike) -> list[ImportStatement]:
        return list(self._scan(self._read_source(file)))

    def add_import(self, file: PathLike, statement: ImportStatement) -> str:
        content = self._read_source(file)
        if "/" in statement.source and not statement.source.startswith("std"):
            include_line = f'#include "{statement.source}"\n'
        else:
            include_line = f"#include <{statement.source}>\n"
        return self._insert_after_last_import(content, self.find_imports(file), include_line)

    def remove_import(self, file: PathLike, symbol: str) -> str:
        content = self._read_source(file)
        matching = [s for s in self.find_imports(file) if symbol in s.source]
        return self._drop_import_lines(content, matching)

    def update_import_path(self, file: PathLike, old_path: str, new_path: str) -> str:
        content = self._read_source(file)
        return content.replace(f"<{old_path}>", f"<{new_path}>").replace(
            f'"{old_path}"', f'"{new_path}"'
        )