"""Unit tests for utility modules."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
import structlog

from blob_batch_delete.models.deletion_result import DeletionResult
from blob_batch_delete.utils.logger import configure_logging, get_logger
from blob_batch_delete.utils.progress import ProgressTracker


class TestProgressTracker:
    def test_initial_state(self) -> None:
        tracker = ProgressTracker(total=10)
        assert tracker.processed == 0
        assert tracker.successful == 0
        assert tracker.failed == 0
        assert tracker.progress_percentage == 0.0

    def test_record_success_and_failure(self) -> None:
        tracker = ProgressTracker(total=4)
        tracker.record_success("deleted a")
        tracker.record_failure("failed b")
        tracker.record_success("deleted c")

        assert tracker.processed == 3
        assert tracker.successful == 2
        assert tracker.failed == 1
        assert tracker.success_messages == ["deleted a", "deleted c"]
        assert tracker.failure_messages == ["failed b"]
        assert tracker.progress_percentage == 75.0

    def test_record_result_folds_partial_result(self) -> None:
        tracker = ProgressTracker(total=5)
        tracker.record_success("first")
        tracker.record_result(
            DeletionResult(success_count=2, failure_count=1, success_messages=("x", "y"), failure_messages=("z",))
        )

        assert tracker.successful == 3
        assert tracker.failed == 1
        assert tracker.success_messages == ["first", "x", "y"]

    def test_zero_total_is_complete(self) -> None:
        assert ProgressTracker(total=0).progress_percentage == 100.0

    def test_to_result(self) -> None:
        tracker = ProgressTracker(total=2)
        tracker.record_success("ok")
        tracker.record_failure("bad")

        result = tracker.to_result()

        assert result == DeletionResult(
            success_count=1,
            failure_count=1,
            success_messages=("ok",),
            failure_messages=("bad",),
        )

    def test_log_progress_does_not_raise(self) -> None:
        tracker = ProgressTracker(total=1)
        tracker.record_success("ok")
        tracker.log_progress()

    def test_elapsed_seconds_non_negative(self) -> None:
        assert ProgressTracker(total=1).elapsed_seconds >= 0.0


class TestLogger:
    @pytest.fixture(autouse=True)
    def _reset_logging(self) -> Iterator[None]:
        root_level = logging.getLogger().level
        yield
        structlog.reset_defaults()
        logging.getLogger().setLevel(root_level)

    def test_configure_sets_root_level(self) -> None:
        configure_logging("WARNING")
        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self) -> None:
        configure_logging("NOT_A_LEVEL")
        assert logging.getLogger().level == logging.INFO

    def test_get_logger_logs_without_error(self, caplog: pytest.LogCaptureFixture) -> None:
        configure_logging("INFO")
        with caplog.at_level(logging.INFO):
            get_logger("tests").info("test_event", answer=42)
        assert "test_event" in caplog.text
        assert "answer" in caplog.text
