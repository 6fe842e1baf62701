"""Azure Blob Storage batch client bound to one storage account."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import structlog
from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient

from blob_batch_delete.core.endpoints import resolve_endpoint
from blob_batch_delete.exceptions import BatchSubmissionError
from blob_batch_delete.models.batch_item import BatchItemResponse, SnapshotOutcome, SnapshotStatus

if TYPE_CHECKING:
    from azure.core.credentials import TokenCredential

logger = structlog.get_logger(__name__)

_CONTAINER_NAME = re.compile(r"[a-z0-9](?!.*--)[a-z0-9-]{1,61}[a-z0-9]")
_SPECIAL_CONTAINERS = frozenset({"$root", "$web", "$logs"})
_MAX_BLOB_NAME_LENGTH = 1024
_ERROR_CODE_HEADER = "x-ms-error-code"


def validate_container_name(name: str) -> str:
    """Check Azure container naming rules."""
    if name in _SPECIAL_CONTAINERS or _CONTAINER_NAME.fullmatch(name):
        return name
    msg = (
        f"invalid container name {name!r}: use 3-63 lowercase letters, digits "
        "and single hyphens, starting and ending with a letter or digit"
    )
    raise ValueError(msg)


def validate_blob_name(name: str) -> str:
    """Check Azure blob naming rules."""
    if not name or len(name) > _MAX_BLOB_NAME_LENGTH:
        msg = f"blob name must be between 1 and {_MAX_BLOB_NAME_LENGTH} characters"
        raise ValueError(msg)
    return name


class BlobDeleteBatch:
    """Delete sub-operations queued for one batch call, in queue order."""

    def __init__(self) -> None:
        self.targets: list[tuple[str, str]] = []

    def add(self, container: str, blob_name: str) -> None:
        """Queue a snapshot-inclusive delete. Raises ValueError for invalid names."""
        self.targets.append((validate_container_name(container), validate_blob_name(blob_name)))

    def __len__(self) -> int:
        return len(self.targets)


def _item_response(http_response: Any) -> BatchItemResponse:
    """Convert one multipart sub-response to a BatchItemResponse."""
    headers = getattr(http_response, "headers", None) or {}
    return BatchItemResponse(
        status_code=int(http_response.status_code),
        error_code=headers.get(_ERROR_CODE_HEADER),
        message=getattr(http_response, "reason", None),
    )


def _error_response(exc: AzureError) -> BatchItemResponse:
    return BatchItemResponse(
        status_code=getattr(exc, "status_code", None) or 0,
        error_code=getattr(exc, "error_code", None),
        message=exc.message or str(exc),
    )


class AzureBlobBatchClient:
    """Batch delete and snapshot operations against one storage account.

    The Azure SDK scopes a blob batch to a single container, so a batch that
    spans containers is sent as one ``delete_blobs`` call per container. The
    returned sub-responses are put back in queue order.
    """

    def __init__(self, service_client: BlobServiceClient, account: str) -> None:
        self.service_client = service_client
        self.account = account

    @classmethod
    def for_account(cls, account: str, credential: TokenCredential) -> AzureBlobBatchClient:
        endpoint = resolve_endpoint(account)
        logger.debug("creating_blob_service_client", account=account, endpoint=endpoint)
        return cls(BlobServiceClient(account_url=endpoint, credential=credential), account)

    def new_batch(self) -> BlobDeleteBatch:
        return BlobDeleteBatch()

    def submit_batch(self, batch: BlobDeleteBatch, timeout: float) -> list[BatchItemResponse]:
        """Send the queued deletions and return one response per item.

        If fewer sub-responses come back than were queued, the list ends at the
        first missing one so positions still line up with the queue. Raises
        BatchSubmissionError when every call for the batch fails.

        ``timeout`` is sent as the service-side operation timeout and also used
        as the transport read timeout, so a stalled connection gives up on the
        client side within the same deadline.
        """
        positions_by_container: dict[str, list[int]] = {}
        for position, (container, _blob_name) in enumerate(batch.targets):
            positions_by_container.setdefault(container, []).append(position)

        responses: list[BatchItemResponse | None] = [None] * len(batch.targets)
        errors: list[AzureError] = []

        for container, positions in positions_by_container.items():
            container_client = self.service_client.get_container_client(container)
            blob_names = [batch.targets[position][1] for position in positions]
            try:
                sub_responses = list(
                    container_client.delete_blobs(
                        *blob_names,
                        delete_snapshots="include",
                        raise_on_any_failure=False,
                        timeout=int(timeout),
                        read_timeout=timeout,
                    )
                )
            except AzureError as exc:
                logger.error(
                    "container_batch_failed",
                    account=self.account,
                    container=container,
                    blob_count=len(blob_names),
                    error=str(exc),
                )
                errors.append(exc)
                for position in positions:
                    responses[position] = _error_response(exc)
                continue

            if len(sub_responses) != len(positions):
                logger.warning(
                    "container_batch_response_count_mismatch",
                    container=container,
                    responses=len(sub_responses),
                    requests=len(positions),
                )
            for position, http_response in zip(positions, sub_responses, strict=False):
                responses[position] = _item_response(http_response)

        if errors and len(errors) == len(positions_by_container):
            msg = f"Batch delete failed for account {self.account}: {errors[0]}"
            raise BatchSubmissionError(msg) from errors[0]

        ordered: list[BatchItemResponse] = []
        for response in responses:
            if response is None:
                break
            ordered.append(response)
        return ordered

    def create_snapshot(self, container: str, blob_name: str) -> SnapshotOutcome:
        """Snapshot a blob if both it and its container exist."""
        container_client = self.service_client.get_container_client(container)
        if not container_client.exists():
            return SnapshotOutcome(status=SnapshotStatus.CONTAINER_NOT_FOUND)

        blob_client = container_client.get_blob_client(blob_name)
        if not blob_client.exists():
            return SnapshotOutcome(status=SnapshotStatus.BLOB_NOT_FOUND)

        try:
            snapshot = blob_client.create_snapshot()
        except ResourceNotFoundError:
            return SnapshotOutcome(status=SnapshotStatus.BLOB_NOT_FOUND)
        return SnapshotOutcome(status=SnapshotStatus.CREATED, snapshot_id=snapshot.get("snapshot"))
