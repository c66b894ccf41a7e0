"""Regex search and replace across the files of a project."""

from __future__ import annotations

import enum
import os
import re
from pathlib import Path
from typing import Callable, Optional, Union

from .preview import PreviewChange, PreviewDiff
from .results import BatchResult

PathLike = Union[str, Path]

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
)

_GROUP_NAME_RE = re.compile(r"[A-Za-z0-9_]+")


class ReplacementMode(enum.Enum):
    """Whether replacements are only previewed or written."""

    PREVIEW = "Preview"
    APPLY = "Apply"


def _should_ignore(path: Path) -> bool:
    text = str(path)
    return any(pattern in text for pattern in _IGNORE_PATTERNS)


def _lines(text: str) -> list[str]:
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


def _group_ref(name: str) -> Union[int, str]:
    return int(name) if name.isdigit() else name


def _compile_template(template: str) -> Callable[[re.Match], str]:
    """Build an expander for `$1`, `${name}` and `$$` replacement templates."""
    pieces: list[Union[str, int]] = []
    literal: list[str] = []
    refs: dict[int, Union[int, str]] = {}
    i = 0
    while i < len(template):
        ch = template[i]
        if ch != "$":
            literal.append(ch)
            i += 1
            continue
        if template.startswith("$$", i):
            literal.append("$")
            i += 2
            continue
        name: Optional[str] = None
        end = i + 1
        if template.startswith("{", i + 1):
            close = template.find("}", i + 2)
            if close > i + 2:
                name = template[i + 2 : close]
                end = close + 1
        else:
            match = _GROUP_NAME_RE.match(template, i + 1)
            if match:
                name = match.group()
                end = match.end()
        if name is None:
            literal.append("$")
            i += 1
            continue
        if literal:
            pieces.append("".join(literal))
            literal = []
        refs[len(pieces)] = _group_ref(name)
        pieces.append(len(pieces))
        i = end
    if literal:
        pieces.append("".join(literal))

    def expand(match: re.Match) -> str:
        out = []
        for index, piece in enumerate(pieces):
            if index in refs:
                try:
                    value = match.group(refs[index])
                except (IndexError, error_type):
                    value = None
                out.append(value or "")
            else:
                out.append(piece)
        return "".join(out)

    return expand


error_type = re.error


class BatchReplacer:
    """Applies one regex replacement to every matching file under a root."""

    def __init__(
        self,
        pattern: str,
        replacement: str,
        file_pattern: Optional[str] = None,
        root_path: PathLike = ".",
    ) -> None:
        try:
            self.pattern = re.compile(pattern)
        except re.error as exc:
            raise ValueError(f"Invalid regex pattern: {pattern}") from exc
        self.replacement = replacement
        self.file_pattern = file_pattern
        self.root_path = Path(root_path)
        self._expand = _compile_template(replacement)

    def preview(self) -> list[PreviewDiff]:
        """Return a diff for each readable file that has matches."""
        previews = []
        for file_path in self.collect_files():
            try:
                content = file_path.read_text(encoding="utf-8")
            except (OSError, ValueError):
                continue
            diff = self.preview_file(file_path, content)
            if diff.num_changes > 0:
                previews.append(diff)
        return previews

    def apply(self) -> BatchResult:
        """Rewrite every matching file; per-file failures are recorded, not raised."""
        result = BatchResult()
        for file_path in self.collect_files():
            result.files_scanned += 1
            try:
                num_replacements = self.apply_to_file(file_path)
            except (OSError, ValueError) as exc:
                result.add_error(f"{file_path}: {exc}")
                continue
            if num_replacements > 0:
                result.add_modified_file(file_path, num_replacements)
        return result

    def preview_file(self, file_path: PathLike, content: str) -> PreviewDiff:
        """Return one change per match; each shows its line with the first match replaced."""
        diff = PreviewDiff(Path(file_path))
        for line_num, line in enumerate(_lines(content), start=1):
            for match in self.pattern.finditer(line):
                replacement = self.pattern.sub(self._expand, line, count=1)
                diff.add_change(
                    PreviewChange(
                        line=line_num,
                        column=match.start() + 1,
                        original=match.group(),
                        replacement=replacement,
                        line_content=line,
                    )
                )
        return diff

    def apply_to_file(self, file_path: PathLike) -> int:
        """Replace all matches in the file and return how many were replaced."""
        path = Path(file_path)
        content = path.read_text(encoding="utf-8")
        num_replacements = 0
        modified = []
        for line in _lines(content):
            replaced = self.pattern.sub(self._expand, line)
            if replaced != line:
                num_replacements += sum(1 for _ in self.pattern.finditer(line))
            modified.append(replaced + "\n")
        if num_replacements > 0:
            with open(path, "w", encoding="utf-8", newline="") as handle:
                handle.write("".join(modified).rstrip("\n"))
        return num_replacements

    def collect_files(self) -> list[Path]:
        """Return the files under the root that match the file pattern."""
        root = self.root_path
        if _should_ignore(root):
            return []
        if root.is_file():
            return [root] if self.matches_file_pattern(root) else []
        files: list[Path] = []
        self._collect(root, files)
        return files

    def _collect(self, directory: Path, files: list[Path]) -> None:
        with os.scandir(directory) as listing:
            entries = sorted(listing, key=lambda entry: entry.name)
        for entry in entries:
            path = directory / entry.name
            if _should_ignore(path):
                continue
            if entry.is_dir(follow_symlinks=False):
                self._collect(path, files)
            elif entry.is_file(follow_symlinks=False) and self.matches_file_pattern(path):
                files.append(path)

    def matches_file_pattern(self, path: PathLike) -> bool:
        """Match the file name against the pattern; no pattern matches every file."""
        if self.file_pattern is None:
            return True
        name = Path(path).name
        if not name:
            return False
        pattern = self.file_pattern
        if pattern.startswith("**/"):
            pattern = pattern[3:]
        return self.simple_glob_match(name, pattern)

    def simple_glob_match(self, text: str, pattern: str) -> bool:
        """Match text against a pattern where `*` stands for any run of characters."""
        parts = pattern.split("*")
        if len(parts) == 1:
            return text == pattern
        pos = 0
        last = len(parts) - 1
        for index, part in enumerate(parts):
            if not part:
                continue
            if index == 0:
                if not text.startswith(part):
                    return False
                pos = len(part)
            elif index == last:
                if not text.endswith(part):
                    return False
            else:
                found = text.find(part, pos)
                if found < 0:
                    return False
                pos = found + len(part)
        return True