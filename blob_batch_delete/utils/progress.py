"""Progress tracking utilities for batch deletions."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from blob_batch_delete.models.deletion_result import DeletionResult
from blob_batch_delete.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ProgressTracker:
    """Track outcomes of a batch deletion.

    Not thread-safe: each task and each worker keeps its own tracker, and the
    orchestrator folds finished results from a single thread.
    """

    total: int
    successful: int = 0
    failed: int = 0
    success_messages: list[str] = field(default_factory=list)
    failure_messages: list[str] = field(default_factory=list)
    start_time: float = field(default_factory=time.monotonic)

    @property
    def processed(self) -> int:
        """Number of requests with a recorded outcome."""
        return self.successful + self.failed

    def record_success(self, message: str) -> None:
        """Record a successful deletion."""
        self.successful += 1
        self.success_messages.append(message)

    def record_failure(self, message: str) -> None:
        """Record a failed deletion."""
        self.failed += 1
        self.failure_messages.append(message)

    def record_result(self, result: DeletionResult) -> None:
        """Fold a finished partial result into this tracker."""
        self.successful += result.success_count
        self.failed += result.failure_count
        self.success_messages.extend(result.success_messages)
        self.failure_messages.extend(result.failure_messages)

    @property
    def elapsed_seconds(self) -> float:
        """Time elapsed since start."""
        return time.monotonic() - self.start_time

    @property
    def progress_percentage(self) -> float:
        """Percentage of total requests processed."""
        if self.total == 0:
            return 100.0
        return (self.processed / self.total) * 100.0

    def log_progress(self) -> None:
        logger.info(
            "batch_progress",
            processed=self.processed,
            total=self.total,
            successful=self.successful,
            failed=self.failed,
            percentage=f"{self.progress_percentage:.1f}%",
            elapsed=f"{self.elapsed_seconds:.1f}s",
        )

    def to_result(self) -> DeletionResult:
        """Freeze the tracked outcomes into a result."""
        return DeletionResult(
            success_count=self.successful,
            failure_count=self.failed,
            success_messages=tuple(self.success_messages),
            failure_messages=tuple(self.failure_messages),
        )
