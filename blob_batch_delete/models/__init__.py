"""Pydantic data models for the batch blob deletion pipeline."""

from blob_batch_delete.models.batch_item import BatchItemResponse, SnapshotOutcome, SnapshotStatus
from blob_batch_delete.models.config import Config
from blob_batch_delete.models.delete_request import DeleteRequest
from blob_batch_delete.models.deletion_result import DeletionResult

__all__ = [
    "BatchItemResponse",
    "Config",
    "DeleteRequest",
    "DeletionResult",
    "SnapshotOutcome",
    "SnapshotStatus",
]
