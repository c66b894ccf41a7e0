from pathlib import Path

import pytest

from powertools.preview import RiskLevel
from powertools.transaction import (
    FileOperation,
    RefactoringTransaction,
    TransactionError,
    TransactionMode,
    TransactionResult,
)


def test_transaction_dry_run(tmp_path):
    file_path = tmp_path / "test.txt"
    file_path.write_text("original")

    tx = RefactoringTransaction(TransactionMode.DRY_RUN)
    tx.add_operation(file_path, "original", "modified")

    result = tx.commit()
    assert result.is_success()
    assert result.successful_operations == 1
    assert result.files_modified == [file_path]
    assert file_path.read_text() == "original"


def test_transaction_execute(tmp_path):
    file_path = tmp_path / "test.txt"
    file_path.write_text("original")

    tx = RefactoringTransaction(TransactionMode.EXECUTE)
    tx.add_operation(file_path, "original", "modified")

    result = tx.commit()
    assert result.is_success()
    assert result.successful_operations == 1
    assert file_path.read_text() == "modified"
    assert tx.is_committed


def test_transaction_rollback(tmp_path):
    file1 = tmp_path / "file1.txt"
    blocker = tmp_path / "blocker.txt"
    file1.write_text("original1")
    blocker.write_text("not a directory")

    tx = RefactoringTransaction(TransactionMode.EXECUTE)
    tx.add_operation(file1, "original1", "modified1")
    tx.add_operation(blocker / "sub" / "file2.txt", "original2", "modified2")

    with pytest.raises(TransactionError, match="rolled back"):
        tx.commit()

    assert file1.read_text() == "original1"
    assert not tx.is_committed


def test_transaction_preview():
    tx = RefactoringTransaction(TransactionMode.DRY_RUN)
    tx.add_operation(Path("test.rs"), "let x = 1;", "let x = 2;")

    preview = tx.preview()
    assert preview.total_files == 1
    assert preview.total_changes == 1


def test_preview_reports_added_lines():
    tx = RefactoringTransaction(TransactionMode.DRY_RUN)
    tx.add_operation(Path("lib.rs"), "a\nb\n", "a\nc\nd\n")

    diff = tx.preview().file_changes[0]
    assert [(c.line, c.original, c.replacement) for c in diff.changes] == [
        (2, "b", "c"),
        (3, "", "d"),
    ]


def test_preview_detects_import_change():
    tx = RefactoringTransaction(TransactionMode.DRY_RUN)
    tx.add_operation(Path("lib.py"), "x = 1\n", "import os\nx = 1\n")

    summary = tx.preview()
    diff = summary.file_changes[0]
    assert len(diff.import_changes) == 1
    assert diff.import_changes[0].source == "detected"
    assert summary.total_import_changes == 1
    assert diff.risk_level is RiskLevel.MEDIUM


def test_add_after_commit_is_rejected(tmp_path):
    tx = RefactoringTransaction(TransactionMode.DRY_RUN)
    tx.commit()
    with pytest.raises(TransactionError, match="committed transaction"):
        tx.add_operation(tmp_path / "a.txt", "", "x")


def test_double_commit_is_rejected():
    tx = RefactoringTransaction(TransactionMode.DRY_RUN)
    tx.commit()
    with pytest.raises(TransactionError, match="already been committed"):
        tx.commit()


def test_add_file_change_reads_current_content(tmp_path):
    existing = tmp_path / "existing.txt"
    existing.write_text("before")
    missing = tmp_path / "missing.txt"

    tx = RefactoringTransaction(TransactionMode.DRY_RUN)
    tx.add_file_change(existing, "after")
    tx.add_file_change(missing, "new")

    ops = tx.operations
    assert ops[0].original_content == "before"
    assert ops[1].original_content == ""
    assert [op.new_content for op in ops] == ["after", "new"]


def test_execute_creates_parent_directories(tmp_path):
    target = tmp_path / "deep" / "nested" / "file.txt"
    tx = RefactoringTransaction(TransactionMode.EXECUTE)
    tx.add_operation(target, "", "content")
    result = tx.commit()
    assert target.read_text() == "content"
    assert result.files_modified == [target]


def test_explicit_rollback_restores_applied_operations(tmp_path):
    target = tmp_path / "f.txt"
    target.write_text("old")
    tx = RefactoringTransaction(TransactionMode.EXECUTE)
    tx.add_operation(target, "old", "new")
    tx.commit()
    assert target.read_text() == "new"
    tx.rollback()
    assert target.read_text() == "old"


def test_result_carries_mode_given_by_value():
    tx = RefactoringTransaction(TransactionMode("dry_run"))
    result = tx.commit()
    assert result.mode is TransactionMode.DRY_RUN
    assert result.total_operations == 0
    assert TransactionMode("execute") is TransactionMode.EXECUTE


def test_format_summary_success():
    result = TransactionResult(
        mode=TransactionMode.DRY_RUN,
        total_operations=1,
        successful_operations=1,
        files_modified=[Path("a.txt")],
    )
    text = result.format_summary()
    assert "DRY-RUN TRANSACTION RESULT" in text
    assert "✅ Transaction completed successfully" in text
    assert "📊 1 total operation\n" in text
    assert "📝 1 file modified:\n   a.txt\n" in text
    assert "❌" not in text


def test_format_summary_failure():
    result = TransactionResult(
        mode=TransactionMode.EXECUTE,
        total_operations=2,
        successful_operations=1,
        failed_operations=1,
        errors=["boom"],
    )
    assert not result.is_success()
    text = result.format_summary()
    assert "         TRANSACTION RESULT\n" in text
    assert "❌ Transaction failed and was rolled back" in text
    assert "📊 2 total operations\n" in text
    assert "❌ 1 failed\n" in text
    assert "⚠️  Errors:\n   boom\n" in text


def test_file_operation_path_is_path():
    op = FileOperation("x/y.txt", "a", "b")
    assert op.path == Path("x/y.txt")
    assert op.applied is False