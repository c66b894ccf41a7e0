"""Previews of refactoring changes with a per-file risk assessment."""

from __future__ import annotations

import copy
import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Union

_SEPARATOR = "========================================\n"
_FILE_SEPARATOR = "\n----------------------------------------\n\n"


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


@dataclass
class PreviewChange:
    """A single change on one line; line and column are 1-based."""

    line: int
    column: int
    original: str
    replacement: str
    line_content: str


class ChangeType(enum.Enum):
    """Type of change being made."""

    RENAME = "Rename"
    MOVE = "Move"
    EXTRACT = "Extract"
    INLINE = "Inline"
    IMPORT_UPDATE = "ImportUpdate"
    IMPORT_ADD = "ImportAdd"
    IMPORT_REMOVE = "ImportRemove"
    OTHER = "Other"


class RiskLevel(enum.IntEnum):
    """Risk of a change, ordered from low to high."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2

    @property
    def label(self) -> str:
        return self.name.lower()

    @property
    def indicator(self) -> str:
        return {RiskLevel.LOW: "🟢", RiskLevel.MEDIUM: "🟡", RiskLevel.HIGH: "🔴"}[self]


@dataclass
class ImportChange:
    """An import change tracked in a preview."""

    change_type: ChangeType
    source: str
    symbols: list[str]
    line: int


_IMPORT_ACTIONS = {
    ChangeType.IMPORT_ADD: "➕ Add import",
    ChangeType.IMPORT_REMOVE: "➖ Remove import",
    ChangeType.IMPORT_UPDATE: "🔄 Update import",
}


@dataclass
class PreviewDiff:
    """All previewed changes in one file."""

    file_path: Path
    num_changes: int = 0
    changes: list[PreviewChange] = field(default_factory=list)
    import_changes: list[ImportChange] = field(default_factory=list)
    risk_level: RiskLevel = RiskLevel.LOW

    def __post_init__(self) -> None:
        self.file_path = Path(self.file_path)

    def add_change(self, change: PreviewChange) -> None:
        self.num_changes += 1
        self.changes.append(change)

    def add_import_change(self, import_change: ImportChange) -> None:
        self.import_changes.append(import_change)

    def set_risk_level(self, risk: RiskLevel) -> None:
        self.risk_level = risk

    def calculate_risk(self) -> None:
        """Set the risk level from the changes and the file name."""
        has_import_removals = any(
            ic.change_type is ChangeType.IMPORT_REMOVE for ic in self.import_changes
        )
        name = self.file_path.name
        is_critical_file = any(word in name for word in ("main", "index", "app"))

        if has_import_removals or is_critical_file:
            self.risk_level = RiskLevel.HIGH
        elif self.num_changes > 10 or self.import_changes:
            self.risk_level = RiskLevel.MEDIUM
        else:
            self.risk_level = RiskLevel.LOW

    def format_diff(self) -> str:
        """Return a human-readable diff of this file's changes."""
        parts = [
            f"{self.risk_level.indicator} 📝 {self.file_path}\n",
            f"   {self.num_changes} change{_plural(self.num_changes)}\n",
        ]
        if self.import_changes:
            count = len(self.import_changes)
            parts.append(f"   {count} import change{_plural(count)}\n")
        parts.append("\n")

        for ic in self.import_changes:
            action = _IMPORT_ACTIONS.get(ic.change_type, "📦 Import change")
            parts.append(f"  {action} from '{ic.source}' (line {ic.line})\n")
            if ic.symbols:
                parts.append(f"     Symbols: {', '.join(ic.symbols)}\n")

        if self.import_changes and self.changes:
            parts.append("\n")

        parts.append(
            "\n".join(
                f"  {c.line}:{c.column}\n  - {c.original}\n  + {c.replacement}\n"
                for c in self.changes
            )
        )
        return "".join(parts)


@dataclass
class RefactoringSummary:
    """Summary of changes across several files, with risk analysis."""

    file_changes: list[PreviewDiff]
    overall_risk: RiskLevel = field(init=False)
    total_files: int = field(init=False)
    total_changes: int = field(init=False)
    total_import_changes: int = field(init=False)
    risk_breakdown: dict[str, int] = field(init=False)
    warnings: list[str] = field(init=False)

    def __post_init__(self) -> None:
        self.file_changes = list(self.file_changes)
        for diff in self.file_changes:
            diff.calculate_risk()

        self.total_files = len(self.file_changes)
        self.total_changes = sum(d.num_changes for d in self.file_changes)
        self.total_import_changes = sum(len(d.import_changes) for d in self.file_changes)
        self.overall_risk = max((d.risk_level for d in self.file_changes), default=RiskLevel.LOW)

        self.risk_breakdown = {}
        for diff in self.file_changes:
            key = diff.risk_level.label
            self.risk_breakdown[key] = self.risk_breakdown.get(key, 0) + 1

        self.warnings = []
        if self.overall_risk is RiskLevel.HIGH:
            self.warnings.append(
                "⚠️  High-risk changes detected. Review carefully before applying."
            )
        if self.total_import_changes > 0:
            self.warnings.append(
                f"📦 {self.total_import_changes} import changes will be made. "
                "Verify all imports resolve correctly."
            )
        high_risk_count = self.risk_breakdown.get("high", 0)
        if high_risk_count > 0:
            self.warnings.append(f"🔴 {high_risk_count} file(s) have high-risk changes")

    def format_summary(self) -> str:
        """Return the summary and every file diff for display."""
        parts = [
            _SEPARATOR,
            f"    {self.overall_risk.indicator} REFACTORING PREVIEW\n",
            _SEPARATOR,
            "\n",
            f"📊 {self.total_files} file{_plural(self.total_files)}, "
            f"{self.total_changes} change{_plural(self.total_changes)}\n",
        ]
        if self.total_import_changes > 0:
            parts.append(
                f"📦 {self.total_import_changes} import change"
                f"{_plural(self.total_import_changes)}\n"
            )

        if self.risk_breakdown:
            parts.append("\n🎯 Risk Assessment:\n")
            rows = (
                ("high", "🔴 High:  "),
                ("medium", "🟡 Medium:"),
                ("low", "🟢 Low:   "),
            )
            for key, label in rows:
                count = self.risk_breakdown.get(key)
                if count is not None:
                    parts.append(f"   {label} {count} file{_plural(count)}\n")

        if self.warnings:
            parts.append("\n⚠️  Warnings:\n")
            parts.extend(f"   {warning}\n" for warning in self.warnings)

        parts.append("\n" + _SEPARATOR + "\n")
        parts.append(_FILE_SEPARATOR.join(diff.format_diff() for diff in self.file_changes))
        parts.append("\n" + _SEPARATOR)
        return "".join(parts)


def generate_preview(diffs: Iterable[PreviewDiff]) -> str:
    """Format a summary of the diffs without changing the diffs passed in."""
    return RefactoringSummary([copy.copy(diff) for diff in diffs]).format_summary()