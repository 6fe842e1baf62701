"""Diagnostic message formatting for deletion outcomes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from blob_batch_delete.models.batch_item import BatchItemResponse
    from blob_batch_delete.models.delete_request import DeleteRequest


def format_line_contexts(requests: Iterable[DeleteRequest]) -> str:
    """Join the line contexts of several requests."""
    return "; ".join(request.line_context for request in requests)


def success_message(request: DeleteRequest) -> str:
    return (
        f"Successfully deleted blob {request.blob_name} from container "
        f"{request.container} (line {request.line_number})"
    )


def item_failure_message(request: DeleteRequest, response: BatchItemResponse) -> str:
    """Failure reported by the service for one sub-operation."""
    return (
        f"Failed to delete blob {request.blob_name} from container {request.container} "
        f"(line {request.line_number}), status code {response.status_code}, "
        f"error code {response.error_code}, service message {response.message}. "
        f"Line context: {request.line_context}"
    )


def failure_message(request: DeleteRequest, reason: str) -> str:
    """Failure caused locally or by the whole batch call."""
    return (
        f"Failed to delete blob {request.blob_name} from container {request.container} "
        f"(line {request.line_number}) due to {reason}. Line context: {request.line_context}"
    )
