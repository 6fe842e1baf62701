"""Deletion of one chunk of blobs through a single batch call."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from blob_batch_delete.core.messages import (
    failure_message,
    format_line_contexts,
    item_failure_message,
    success_message,
)
from blob_batch_delete.models.batch_item import SnapshotStatus
from blob_batch_delete.utils.progress import ProgressTracker

if TYPE_CHECKING:
    from collections.abc import Sequence

    from blob_batch_delete.models.batch_item import BatchItemResponse
    from blob_batch_delete.models.delete_request import DeleteRequest
    from blob_batch_delete.models.deletion_result import DeletionResult
    from blob_batch_delete.services.protocols import BlobBatchClientProtocol, DeleteBatchProtocol

logger = structlog.get_logger(__name__)

# Deadline for one batch submission, in seconds.
DEFAULT_BATCH_TIMEOUT = 120.0


class BatchDeletionTask:
    """Delete one chunk of requests with a single batch call.

    Per-item and whole-batch failures are counted in the returned result and
    never raised. Sub-responses are matched to requests by position.
    """

    def __init__(
        self,
        client: BlobBatchClientProtocol,
        requests: Sequence[DeleteRequest],
        snapshot_enabled: bool = False,
        timeout: float = DEFAULT_BATCH_TIMEOUT,
    ) -> None:
        self.client = client
        self.requests = tuple(requests)
        self.snapshot_enabled = snapshot_enabled
        self.timeout = timeout
        self._tracker = ProgressTracker(total=len(self.requests))
        self._accounted: set[int] = set()

    def execute(self) -> DeletionResult:
        self._tracker = ProgressTracker(total=len(self.requests))
        self._accounted = set()
        submitted: list[int] = []

        try:
            batch = self.client.new_batch()
            for index, request in enumerate(self.requests):
                if self.snapshot_enabled:
                    self._create_snapshot(request)
                try:
                    batch.add(request.container, request.blob_name)
                except Exception as exc:
                    logger.error(
                        "queue_deletion_failed",
                        blob=request.blob_name,
                        container=request.container,
                        line_number=request.line_number,
                        line_context=request.line_context,
                        error=str(exc),
                    )
                    self._record_failure(index, failure_message(request, f"queueing error: {exc}"))
                    continue
                submitted.append(index)

            if submitted:
                self._submit(batch, submitted)
        except Exception:
            # Outcomes already recorded stand; only unaccounted requests fail.
            unaccounted = [
                (index, request)
                for index, request in enumerate(self.requests)
                if index not in self._accounted
            ]
            logger.exception(
                "unexpected_batch_error",
                unaccounted=len(unaccounted),
                lines=format_line_contexts(request for _, request in unaccounted),
            )
            for index, request in unaccounted:
                self._record_failure(index, failure_message(request, "unexpected batch error"))

        return self._tracker.to_result()

    def _submit(self, batch: DeleteBatchProtocol, submitted: list[int]) -> None:
        submitted_requests = [self.requests[index] for index in submitted]
        try:
            responses = self.client.submit_batch(batch, timeout=self.timeout)
        except Exception as exc:
            logger.error(
                "batch_submission_failed",
                blob_count=len(submitted),
                lines=format_line_contexts(submitted_requests),
                error=str(exc),
            )
            for index, request in zip(submitted, submitted_requests, strict=True):
                self._record_failure(index, failure_message(request, f"batch submission error: {exc}"))
            return

        logger.debug("batch_submitted", blob_count=len(submitted), responses=len(responses))

        if len(responses) != len(submitted):
            logger.warning(
                "batch_response_count_mismatch",
                responses=len(responses),
                requests=len(submitted),
            )

        for index, response in zip(submitted, responses, strict=False):
            request = self.requests[index]
            try:
                self._classify(index, request, response)
            except Exception as exc:
                if index in self._accounted:
                    continue
                logger.exception(
                    "sub_response_processing_failed",
                    blob=request.blob_name,
                    container=request.container,
                    line_number=request.line_number,
                    line_context=request.line_context,
                )
                self._record_failure(index, failure_message(request, f"response processing error: {exc}"))

        # Items without a sub-response have an unknown outcome, not a failure.
        self._accounted.update(submitted[len(responses) :])

    def _classify(self, index: int, request: DeleteRequest, response: BatchItemResponse) -> None:
        if response.succeeded:
            logger.info(
                "blob_deleted",
                blob=request.blob_name,
                container=request.container,
                line_number=request.line_number,
            )
            self._accounted.add(index)
            self._tracker.record_success(success_message(request))
        else:
            logger.error(
                "blob_delete_failed",
                blob=request.blob_name,
                container=request.container,
                line_number=request.line_number,
                status_code=response.status_code,
                error_code=response.error_code,
                service_message=response.message,
                line_context=request.line_context,
            )
            self._record_failure(index, item_failure_message(request, response))

    def _record_failure(self, index: int, message: str) -> None:
        self._accounted.add(index)
        self._tracker.record_failure(message)

    def _create_snapshot(self, request: DeleteRequest) -> None:
        """Best-effort snapshot; never affects the deletion outcome."""
        try:
            outcome = self.client.create_snapshot(request.container, request.blob_name)
        except Exception as exc:
            logger.error(
                "snapshot_failed",
                blob=request.blob_name,
                container=request.container,
                line_number=request.line_number,
                line_context=request.line_context,
                error=str(exc),
            )
            return

        if outcome.status is SnapshotStatus.CREATED:
            logger.info(
                "snapshot_created",
                snapshot_id=outcome.snapshot_id,
                blob=request.blob_name,
                container=request.container,
                line_number=request.line_number,
            )
        else:
            logger.warning(
                "snapshot_target_not_found",
                reason=outcome.status.value,
                blob=request.blob_name,
                container=request.container,
                line_number=request.line_number,
                line_context=request.line_context,
            )
