"""Aggregate result of one or more batch deletions."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DeletionResult(BaseModel):
    """Success and failure tally with per-item diagnostic messages.

    Instances are immutable. ``merge`` returns a new result; counts merge
    associatively and commutatively, messages keep the order they were
    produced in.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    success_count: int = Field(default=0, ge=0)
    failure_count: int = Field(default=0, ge=0)
    success_messages: tuple[str, ...] = ()
    failure_messages: tuple[str, ...] = ()

    @property
    def total(self) -> int:
        """Number of requests with a known outcome."""
        return self.success_count + self.failure_count

    @property
    def has_failures(self) -> bool:
        return self.failure_count > 0

    def merge(self, other: DeletionResult) -> DeletionResult:
        """Combine two results into a new one."""
        return DeletionResult(
            success_count=self.success_count + other.success_count,
            failure_count=self.failure_count + other.failure_count,
            success_messages=self.success_messages + other.success_messages,
            failure_messages=self.failure_messages + other.failure_messages,
        )
