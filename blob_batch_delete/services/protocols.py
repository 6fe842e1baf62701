"""Service protocols defining interfaces for dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from blob_batch_delete.models.batch_item import BatchItemResponse, SnapshotOutcome
    from blob_batch_delete.models.delete_request import DeleteRequest


class DeleteBatchProtocol(Protocol):
    """A batch of delete sub-operations being assembled."""

    def add(self, container: str, blob_name: str) -> None: ...

    def __len__(self) -> int: ...


class BlobBatchClientProtocol(Protocol):
    """Batch-capable storage client bound to one account.

    Implementations must be safe to call from several threads at once.
    """

    def new_batch(self) -> DeleteBatchProtocol: ...

    def submit_batch(
        self,
        batch: DeleteBatchProtocol,
        timeout: float,
    ) -> list[BatchItemResponse]: ...

    def create_snapshot(self, container: str, blob_name: str) -> SnapshotOutcome: ...


class RequestSourceProtocol(Protocol):
    """Produces the ordered delete requests for a run."""

    @property
    def source_description(self) -> str: ...

    def read_all(self) -> list[DeleteRequest]: ...
