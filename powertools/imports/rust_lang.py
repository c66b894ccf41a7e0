"""Import analysis for Rust `use` declarations."""

from __future__ import annotations

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
_LITERAL = "literal"

_RAW_STRING_RE = re.compile(r'(?:br|cr|r)(#*)"')
_STRING_START_RE = re.compile(r'[bc]?"')
_RAW_IDENT_RE = re.compile(r"r#[^\W\d]\w*")
_IDENT_RE = re.compile(r"[^\W\d]\w*")
_NUMBER_RE = re.compile(r"\d\w*(?:\.\d\w*)?")

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {closer: opener for opener, closer in _OPENERS.items()}
_SEMICOLON_ITEMS = {"use", "static", "type"}
_FN_QUALIFIERS = {"fn", "unsafe", "async", "extern"}


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str

    def is_punct(self, text: str) -> bool:
        return self.kind == _PUNCT and self.text == text

    def is_ident(self, text: Optional[str] = None) -> bool:
        return self.kind == _IDENT and (text is None or self.text == text)


def _skip_block_comment(text: str, start: int) -> int:
    depth = 0
    i = start
    while i < len(text):
        if text.startswith("/*", i):
            depth += 1
            i += 2
        elif text.startswith("*/", i):
            depth -= 1
            i += 2
            if depth == 0:
                return i
        else:
            i += 1
    raise ValueError("unterminated block comment")


def _scan_quoted(text: str, start: int, quote: str) -> int:
    i = start
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
        elif ch == quote:
            return i + 1
        else:
            i += 1
    raise ValueError("unterminated string literal")


def _scan_char(text: str, start: int) -> Optional[int]:
    """Return the end of a character literal at `start`, or None for a lifetime."""
    n = len(text)
    if start + 1 < n and text[start + 1] == "\\":
        end = text.find("'", start + 3)
        if end < 0:
            raise ValueError("unterminated character literal")
        return end + 1
    if start + 2 < n and text[start + 2] == "'" and text[start + 1] != "'":
        return start + 3
    return None


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
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
            i = _skip_block_comment(text, i)
            continue
        match = _RAW_STRING_RE.match(text, i)
        if match:
            closing = '"' + match.group(1)
            end = text.find(closing, match.end())
            if end < 0:
                raise ValueError("unterminated raw string literal")
            tokens.append(_Token(_LITERAL, text[i : end + len(closing)]))
            i = end + len(closing)
            continue
        match = _STRING_START_RE.match(text, i)
        if match:
            end = _scan_quoted(text, match.end(), '"')
            tokens.append(_Token(_LITERAL, text[i:end]))
            i = end
            continue
        if text.startswith("b'", i):
            end = _scan_char(text, i + 1)
            if end is None:
                raise ValueError("malformed byte literal")
            tokens.append(_Token(_LITERAL, text[i:end]))
            i = end
            continue
        if ch == "'":
            end = _scan_char(text, i)
            if end is None:
                match = _IDENT_RE.match(text, i + 1)
                if match is None:
                    raise ValueError("stray quote")
                end = match.end()
            tokens.append(_Token(_LITERAL, text[i:end]))
            i = end
            continue
        match = _RAW_IDENT_RE.match(text, i) or _IDENT_RE.match(text, i)
        if match:
            tokens.append(_Token(_IDENT, match.group()))
            i = match.end()
            continue
        match = _NUMBER_RE.match(text, i)
        if match:
            tokens.append(_Token(_LITERAL, match.group()))
            i = match.end()
            continue
        if text.startswith("::", i):
            tokens.append(_Token(_PUNCT, "::"))
            i += 2
            continue
        tokens.append(_Token(_PUNCT, ch))
        i += 1
    return tokens


def _skip_group(item: list[_Token], start: int) -> int:
    depth = 0
    for index in range(start, len(item)):
        token = item[index]
        if token.kind != _PUNCT:
            continue
        if token.text in _OPENERS:
            depth += 1
        elif token.text in _CLOSERS:
            depth -= 1
            if depth == 0:
                return index + 1
    return len(item)


def _item_start(item: list[_Token]) -> int:
    """Index of the first keyword after attributes and visibility."""
    i = 0
    while i < len(item) and item[i].is_punct("#"):
        i += 1
        if i < len(item) and item[i].is_punct("!"):
            i += 1
        i = _skip_group(item, i)
    if i < len(item) and item[i].is_ident("pub"):
        i += 1
        if i < len(item) and item[i].is_punct("("):
            i = _skip_group(item, i)
    return i


def _ends_at_semicolon(item: list[_Token]) -> bool:
    start = _item_start(item)
    if start >= len(item) or item[start].kind != _IDENT:
        return False
    keyword = item[start].text
    if keyword in _SEMICOLON_ITEMS:
        return True
    if keyword == "const":
        following = item[start + 1].text if start + 1 < len(item) else ""
        return following not in _FN_QUALIFIERS
    return False


def _is_inner_attribute(item: list[_Token]) -> bool:
    return len(item) >= 2 and item[0].is_punct("#") and item[1].is_punct("!")


def _split_items(tokens: list[_Token]) -> list[list[_Token]]:
    items: list[list[_Token]] = []
    current: list[_Token] = []
    stack: list[str] = []
    for token in tokens:
        current.append(token)
        if token.kind != _PUNCT:
            continue
        if token.text in _OPENERS:
            stack.append(token.text)
        elif token.text in _CLOSERS:
            if not stack or stack[-1] != _CLOSERS[token.text]:
                raise ValueError(f"unbalanced delimiter {token.text!r}")
            stack.pop()
            if stack:
                continue
            if token.text == "]" and _is_inner_attribute(current):
                current = []
            elif token.text == "}" and not _ends_at_semicolon(current):
                items.append(current)
                current = []
        elif token.text == ";" and not stack:
            if len(current) > 1:
                items.append(current)
            current = []
    if stack or current:
        raise ValueError("unexpected end of input")
    return items


def _use_body(item: list[_Token]) -> Optional[list[_Token]]:
    start = _item_start(item)
    if start < len(item) and item[start].is_ident("use"):
        return item[start + 1 : -1]
    return None


def _at(tokens: list[_Token], pos: int) -> Optional[_Token]:
    return tokens[pos] if pos < len(tokens) else None


def _use_statement(prefix: str, symbol: str, line: int, alias: Optional[str] = None) -> ImportStatement:
    return ImportStatement(
        source=prefix,
        symbols=[symbol],
        location=ImportLocation(line=line, column=0, end_line=line, end_column=0),
        kind=ImportKind.USE,
        alias=alias,
    )


def _parse_use_tree(
    tokens: list[_Token], pos: int, prefix: str, line: int, out: list[ImportStatement]
) -> int:
    token = _at(tokens, pos)
    if token is None:
        raise ValueError("incomplete use tree")
    if token.is_punct("*"):
        out.append(_use_statement(prefix, "*", line))
        return pos + 1
    if token.is_punct("{"):
        pos += 1
        while True:
            token = _at(tokens, pos)
            if token is None:
                raise ValueError("unclosed use group")
            if token.is_punct("}"):
                return pos + 1
            pos = _parse_use_tree(tokens, pos, prefix, line, out)
            token = _at(tokens, pos)
            if token is not None and token.is_punct(","):
                pos += 1
            elif token is None or not token.is_punct("}"):
                raise ValueError("expected ',' or '}' in use group")
    if token.is_ident():
        name = token.text
        following = _at(tokens, pos + 1)
        if following is not None and following.is_punct("::"):
            new_prefix = f"{prefix}::{name}" if prefix else name
            return _parse_use_tree(tokens, pos + 2, new_prefix, line, out)
        if following is not None and following.is_ident("as"):
            alias = _at(tokens, pos + 2)
            if alias is None or not alias.is_ident():
                raise ValueError("expected identifier after 'as'")
            out.append(_use_statement(prefix, name, line, alias.text))
            return pos + 3
        out.append(_use_statement(prefix, name, line))
        return pos + 1
    raise ValueError(f"unexpected token {token.text!r} in use tree")


class RustImportAnalyzer(ImportAnalyzer):
    """Finds and edits top-level `use` declarations.

    Line numbers are approximate: each top-level item counts as one line.
    """

    def find_imports(self, file: PathLike) -> list[ImportStatement]:
        content = self._read_source(file)
        imports: list[ImportStatement] = []
        try:
            items = _split_items(_tokenize(content))
            for line, item in enumerate(items, start=1):
                body = _use_body(item)
                if body is None:
                    continue
                if body and body[0].is_punct("::"):
                    body = body[1:]
                end = _parse_use_tree(body, 0, "", line, imports)
                if end != len(body):
                    raise ValueError("trailing tokens in use declaration")
        except ValueError as exc:
            raise ValueError(f"Failed to parse Rust file: {file}") from exc
        return imports

    def add_import(self, file: PathLike, statement: ImportStatement) -> str:
        content = self._read_source(file)
        if statement.source and statement.symbols:
            symbol = statement.symbols[0]
            if symbol == "*":
                use_line = f"use {statement.source}::*;\n"
            elif statement.alias is not None:
                use_line = f"use {statement.source}::{symbol} as {statement.alias};\n"
            else:
                use_line = f"use {statement.source}::{symbol};\n"
        else:
            use_line = f"use {statement.source};\n"
        return self._insert_after_last_import(content, self.find_imports(file), use_line)

    def remove_import(self, file: PathLike, symbol: str) -> str:
        content = self._read_source(file)
        matching = [
            s for s in self.find_imports(file) if symbol in s.symbols or s.source.endswith(symbol)
        ]
        return self._drop_import_lines(content, matching)

    def update_import_path(self, file: PathLike, old_path: str, new_path: str) -> str:
        content = self._read_source(file)
        lines = self._split_lines(content)
        new_content = content
        for statement in self.find_imports(file):
            if statement.source != old_path and not statement.source.startswith(f"{old_path}::"):
                continue
            if 0 < statement.location.line <= len(lines):
                old_line = lines[statement.location.line - 1]
                new_content = new_content.replace(old_line, old_line.replace(old_path, new_path))
        return new_content