from pathlib import Path

from powertools.preview import (
    ChangeType,
    ImportChange,
    PreviewChange,
    PreviewDiff,
    RefactoringSummary,
    RiskLevel,
    generate_preview,
)


def _change(line=10, column=5, original="foo", replacement="bar"):
    return PreviewChange(
        line=line,
        column=column,
        original=original,
        replacement=replacement,
        line_content="    let x = foo;",
    )


def test_preview_diff_format():
    diff = PreviewDiff(Path("src/test.rs"))
    diff.add_change(_change())
    formatted = diff.format_diff()
    assert "src/test.rs" in formatted
    assert "10:5" in formatted
    assert "- foo" in formatted
    assert "+ bar" in formatted


def test_add_change_counts():
    diff = PreviewDiff("src/test.rs")
    diff.add_change(_change())
    diff.add_change(_change(line=11))
    assert diff.num_changes == len(diff.changes) == 2
    assert diff.file_path == Path("src/test.rs")


def test_format_diff_single_change_wording():
    diff = PreviewDiff("src/test.rs")
    diff.add_change(_change())
    assert diff.format_diff().startswith("🟢 📝 src/test.rs\n   1 change\n\n")


def test_format_diff_shows_import_changes():
    diff = PreviewDiff("src/lib.ts")
    diff.add_import_change(
        ImportChange(ChangeType.IMPORT_UPDATE, "./utils", ["oldName", "newName"], 3)
    )
    text = diff.format_diff()
    assert "🔄 Update import from './utils' (line 3)" in text
    assert "Symbols: oldName, newName" in text


def test_risk_low_for_few_changes():
    diff = PreviewDiff("src/util.rs")
    diff.add_change(_change())
    diff.calculate_risk()
    assert diff.risk_level is RiskLevel.LOW


def test_risk_high_for_critical_file():
    diff = PreviewDiff("src/main.rs")
    diff.calculate_risk()
    assert diff.risk_level is RiskLevel.HIGH


def test_risk_high_for_import_removal():
    diff = PreviewDiff("src/util.rs")
    diff.add_import_change(ImportChange(ChangeType.IMPORT_REMOVE, "x", [], 1))
    diff.calculate_risk()
    assert diff.risk_level is RiskLevel.HIGH


def test_risk_medium_for_many_changes():
    diff = PreviewDiff("src/util.rs")
    for line in range(1, 12):
        diff.add_change(_change(line=line))
    diff.calculate_risk()
    assert diff.risk_level is RiskLevel.MEDIUM


def test_risk_medium_for_import_update():
    diff = PreviewDiff("src/util.rs")
    diff.add_import_change(ImportChange(ChangeType.IMPORT_UPDATE, "x", [], 1))
    diff.calculate_risk()
    assert diff.risk_level is RiskLevel.MEDIUM


def test_overall_risk_is_highest_level():
    low = PreviewDiff("src/util.rs")
    low.add_change(_change())
    medium = PreviewDiff("src/other.rs")
    medium.add_import_change(ImportChange(ChangeType.IMPORT_UPDATE, "x", [], 1))
    summary = RefactoringSummary([low, medium])
    assert summary.overall_risk is RiskLevel.MEDIUM
    assert summary.risk_breakdown == {"low": 1, "medium": 1}


def test_summary_totals_and_warnings():
    high = PreviewDiff("src/main.rs")
    high.add_change(_change())
    low = PreviewDiff("src/util.rs")
    low.add_change(_change())
    low.add_change(_change(line=12))
    summary = RefactoringSummary([high, low])
    assert summary.total_files == 2
    assert summary.total_changes == 3
    assert summary.overall_risk is RiskLevel.HIGH
    assert summary.risk_breakdown == {"high": 1, "low": 1}
    assert summary.warnings == [
        "⚠️  High-risk changes detected. Review carefully before applying.",
        "🔴 1 file(s) have high-risk changes",
    ]


def test_summary_of_nothing_is_low_risk():
    summary = RefactoringSummary([])
    assert summary.overall_risk is RiskLevel.LOW
    assert summary.total_changes == 0
    assert summary.warnings == []


def test_summary_import_warning():
    diff = PreviewDiff("src/util.ts")
    diff.add_import_change(ImportChange(ChangeType.IMPORT_ADD, "react", ["useState"], 1))
    summary = RefactoringSummary([diff])
    assert summary.total_import_changes == 1
    assert (
        "📦 1 import changes will be made. Verify all imports resolve correctly."
        in summary.warnings
    )


def test_format_summary_layout():
    diff = PreviewDiff("src/main.rs")
    diff.add_change(_change())
    text = RefactoringSummary([diff]).format_summary()
    assert "    🔴 REFACTORING PREVIEW\n" in text
    assert "📊 1 file, 1 change\n" in text
    assert "   🔴 High:   1 file\n" in text
    assert text.endswith("\n========================================\n")


def test_generate_preview_leaves_input_untouched():
    diff = PreviewDiff("src/main.rs")
    diff.add_change(_change())
    text = generate_preview([diff])
    assert "src/main.rs" in text
    assert diff.risk_level is RiskLevel.LOW


def test_generate_preview_separates_files():
    first = PreviewDiff("a.rs")
    first.add_change(_change())
    second = PreviewDiff("b.rs")
    second.add_change(_change())
    text = generate_preview([first, second])
    assert text.count("----------------------------------------") == 1