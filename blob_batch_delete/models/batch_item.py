"""Per-item outcomes returned by the remote storage calls."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class BatchItemResponse(BaseModel):
    """One sub-response of a batch delete call."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    error_code: str | None = None
    message: str | None = None

    @property
    def succeeded(self) -> bool:
        """2xx statuses count as a successful deletion."""
        return 200 <= self.status_code < 300


class SnapshotStatus(StrEnum):
    """Outcome of a pre-delete snapshot attempt."""

    CREATED = "created"
    CONTAINER_NOT_FOUND = "container_not_found"
    BLOB_NOT_FOUND = "blob_not_found"


class SnapshotOutcome(BaseModel):
    """Result of snapshotting a blob before it is deleted."""

    model_config = ConfigDict(frozen=True)

    status: SnapshotStatus
    snapshot_id: str | None = None
