"""Import analysis for TypeScript and JavaScript `import` statements."""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from typing import Optional

from .model import (
    ImportAnalyzer,
    ImportKind,
    ImportLocation,
    ImportStatement,
    PathLike,
)

_IDENT = "ident"
_PUNCT = "punct"
_STRING = "string"
_OTHER = "other"

_IDENT_RE = re.compile(r"(?:[^\W\d]|\$)(?:\w|\$)*")
_NUMBER_RE = re.compile(r"\.?\d[\w.]*")
_REGEX_KEYWORDS = {
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
    "throw", "case", "do", "else", "yield", "await",
}
_TYPE_MODIFIERS = {"type", "typeof"}


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    start: int
    end: int


def _scan_string(text: str, start: int) -> int:
    quote = text[start]
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
        elif ch == quote:
            return i + 1
        elif ch == "\n":
            return i
        else:
            i += 1
    return len(text)


def _scan_regex(text: str, start: int) -> int:
    i = start + 1
    in_class = False
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "\n":
            return i
        if ch == "[":
            in_class = True
        elif ch == "]":
            in_class = False
        elif ch == "/" and not in_class:
            i += 1
            while i < len(text) and (text[i].isalnum() or text[i] == "_"):
                i += 1
            return i
        i += 1
    return len(text)


def _scan_template(text: str, start: int, origin: int, tokens: list[_Token], stack: list[str]) -> int:
    """Scan template text from `start`; stop at the closing backtick or at `${`."""
    i = start
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
        elif ch == "`":
            tokens.append(_Token(_OTHER, text[origin : i + 1], origin, i + 1))
            return i + 1
        elif text.startswith("${", i):
            tokens.append(_Token(_PUNCT, "${", i, i + 2))
            stack.append("${")
            return i + 2
        else:
            i += 1
    tokens.append(_Token(_OTHER, text[origin:], origin, len(text)))
    return len(text)


def _regex_allowed(previous: Optional[_Token]) -> bool:
    if previous is None:
        return True
    if previous.kind == _PUNCT:
        return previous.text not in (")", "]", "}")
    if previous.kind == _IDENT:
        return previous.text in _REGEX_KEYWORDS
    return False


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    stack: list[str] = []
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch.isspace():
            i += 1
            continue
        if text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end < 0 else end
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end < 0 else end + 2
            continue
        if ch in "'\"":
            end = _scan_string(text, i)
            tokens.append(_Token(_STRING, text[i:end], i, end))
            i = end
            continue
        if ch == "`":
            i = _scan_template(text, i + 1, i, tokens, stack)
            continue
        if ch == "}" and stack and stack[-1] == "${":
            stack.pop()
            i = _scan_template(text, i + 1, i, tokens, stack)
            continue
        if ch == "/" and _regex_allowed(tokens[-1] if tokens else None):
            end = _scan_regex(text, i)
            tokens.append(_Token(_OTHER, text[i:end], i, end))
            i = end
            continue
        match = _IDENT_RE.match(text, i)
        if match:
            tokens.append(_Token(_IDENT, match.group(), i, match.end()))
            i = match.end()
            continue
        match = _NUMBER_RE.match(text, i)
        if match:
            tokens.append(_Token(_OTHER, match.group(), i, match.end()))
            i = match.end()
            continue
        if ch == "{":
            stack.append("{")
        elif ch == "}" and stack:
            stack.pop()
        tokens.append(_Token(_PUNCT, ch, i, i + 1))
        i += 1
    return tokens


@dataclass
class _Cursor:
    tokens: list[_Token]
    pos: int

    def peek(self, offset: int = 0) -> Optional[_Token]:
        index = self.pos + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def at(self, kind: str, text: Optional[str] = None, offset: int = 0) -> bool:
        token = self.peek(offset)
        return token is not None and token.kind == kind and (text is None or token.text == text)

    def advance(self) -> _Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    @property
    def last(self) -> _Token:
        return self.tokens[self.pos - 1]


def _specifier_name(group: list[_Token]) -> Optional[str]:
    if (
        len(group) >= 2
        and group[0].kind == _IDENT
        and group[0].text in _TYPE_MODIFIERS
        and group[1].kind == _IDENT
        and group[1].text != "as"
    ):
        group = group[1:]
    for index, token in enumerate(group):
        if token.kind == _IDENT and not (index > 0 and token.text == "as"):
            return token.text
    return None


def _parse_named(cursor: _Cursor) -> Optional[list[str]]:
    cursor.advance()
    symbols: list[str] = []
    group: list[_Token] = []
    while True:
        token = cursor.peek()
        if token is None:
            return None
        cursor.advance()
        if token.kind == _PUNCT and token.text in (",", "}"):
            name = _specifier_name(group)
            if name is not None:
                symbols.append(name)
            group = []
            if token.text == "}":
                return symbols
        else:
            group.append(token)


def _parse_clause(cursor: _Cursor) -> Optional[tuple[list[str], ImportKind, Optional[str]]]:
    if cursor.at(_PUNCT, "*"):
        cursor.advance()
        if not (cursor.at(_IDENT, "as") and cursor.at(_IDENT, offset=1)):
            return None
        cursor.advance()
        return ["*"], ImportKind.NAMESPACE, cursor.advance().text
    if cursor.at(_PUNCT, "{"):
        names = _parse_named(cursor)
        if names is None:
            return None
        return names, ImportKind.NAMED, None
    if cursor.at(_IDENT):
        if cursor.at(_PUNCT, "=", 1):
            return None
        name = cursor.advance().text
        if cursor.at(_PUNCT, ","):
            cursor.advance()
            if _parse_clause(cursor) is None:
                return None
        return [name], ImportKind.DEFAULT, None
    return None


def _skip_braces(cursor: _Cursor) -> None:
    depth = 0
    while cursor.peek() is not None:
        token = cursor.advance()
        if token.kind != _PUNCT:
            continue
        if token.text == "{":
            depth += 1
        elif token.text == "}":
            depth -= 1
            if depth == 0:
                return


def _is_import_keyword(tokens: list[_Token], index: int) -> bool:
    token = tokens[index]
    if token.kind != _IDENT or token.text != "import":
        return False
    if index > 0 and tokens[index - 1].kind == _PUNCT and tokens[index - 1].text == ".":
        return False
    if index + 1 >= len(tokens):
        return False
    following = tokens[index + 1]
    return not (following.kind == _PUNCT and following.text in ("(", ".", ":"))


class _Positions:
    def __init__(self, text: str) -> None:
        self._starts = [0] + [m.end() for m in re.finditer("\n", text)]

    def of(self, offset: int) -> tuple[int, int]:
        row = bisect.bisect_right(self._starts, offset) - 1
        return row + 1, offset - self._starts[row]


def _parse_import(cursor: _Cursor, positions: _Positions) -> Optional[ImportStatement]:
    keyword = cursor.advance()
    symbols: list[str] = []
    kind = ImportKind.SIDE_EFFECT
    alias: Optional[str] = None
    if not cursor.at(_STRING):
        if cursor.peek() is not None and cursor.at(_IDENT) and cursor.peek().text in _TYPE_MODIFIERS:
            if not (
                cursor.at(_IDENT, "from", 1)
                or cursor.at(_PUNCT, ",", 1)
                or cursor.at(_PUNCT, "=", 1)
            ):
                cursor.advance()
        clause = _parse_clause(cursor)
        if clause is None:
            return None
        symbols, kind, alias = clause
        if not cursor.at(_IDENT, "from"):
            return None
        cursor.advance()
    if not cursor.at(_STRING):
        return None
    source = cursor.advance().text.strip("\"'")
    if (cursor.at(_IDENT, "with") or cursor.at(_IDENT, "assert")) and cursor.at(_PUNCT, "{", 1):
        cursor.advance()
        _skip_braces(cursor)
    if cursor.at(_PUNCT, ";"):
        cursor.advance()
    line, column = positions.of(keyword.start)
    end_line, end_column = positions.of(cursor.last.end)
    return ImportStatement(
        source=source,
        symbols=symbols,
        location=ImportLocation(line=line, column=column, end_line=end_line, end_column=end_column),
        kind=kind,
        alias=alias,
    )


class TypeScriptImportAnalyzer(ImportAnalyzer):
    """Finds and edits ES module `import` statements."""

    def find_imports(self, file: PathLike) -> list[ImportStatement]:
        content = self._read_source(file)
        tokens = _tokenize(content)
        positions = _Positions(content)
        imports: list[ImportStatement] = []
        index = 0
        while index < len(tokens):
            if _is_import_keyword(tokens, index):
                cursor = _Cursor(tokens, index)
                statement = _parse_import(cursor, positions)
                if statement is not None:
                    imports.append(statement)
                    index = cursor.pos
                    continue
            index += 1
        return imports

    def add_import(self, file: PathLike, statement: ImportStatement) -> str:
        content = self._read_source(file)
        if statement.kind is ImportKind.NAMED:
            import_line = f"import {{ {', '.join(statement.symbols)} }} from '{statement.source}';\n"
        elif statement.kind is ImportKind.DEFAULT:
            if not statement.symbols:
                raise ValueError("A default import needs a symbol")
            import_line = f"import {statement.symbols[0]} from '{statement.source}';\n"
        elif statement.kind is ImportKind.NAMESPACE:
            if statement.alias is not None:
                import_line = f"import * as {statement.alias} from '{statement.source}';\n"
            else:
                import_line = f"import * from '{statement.source}';\n"
        elif statement.kind is ImportKind.SIDE_EFFECT:
            import_line = f"import '{statement.source}';\n"
        else:
            raise ValueError(f"Unsupported import kind for TypeScript: {statement.kind.value}")
        return self._insert_after_last_import(content, self.find_imports(file), import_line)

    def remove_import(self, file: PathLike, symbol: str) -> str:
        content = self._read_source(file)
        matching = [s for s in self.find_imports(file) if symbol in s.symbols]
        return self._drop_import_lines(content, matching)

    def update_import_path(self, file: PathLike, old_path: str, new_path: str) -> str:
        content = self._read_source(file)
        return content.replace(f"'{old_path}'", f"'{new_path}'").replace(
            f'"{old_path}"', f'"{new_path}"'
        )