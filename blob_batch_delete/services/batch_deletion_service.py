"""Account-partitioned scheduling of batch blob deletions."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed, wait
from typing import TYPE_CHECKING

import structlog

from blob_batch_delete.core.chunking import ChunkCursor, group_by_account, workers_for
from blob_batch_delete.exceptions import AccountSetupError, ConfigurationError
from blob_batch_delete.models.config import MAX_BATCH_SIZE
from blob_batch_delete.models.deletion_result import DeletionResult
from blob_batch_delete.services.batch_deletion_task import DEFAULT_BATCH_TIMEOUT, BatchDeletionTask
from blob_batch_delete.utils.progress import ProgressTracker

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from blob_batch_delete.models.delete_request import DeleteRequest
    from blob_batch_delete.services.protocols import BlobBatchClientProtocol, RequestSourceProtocol

logger = structlog.get_logger(__name__)

# Grace period for in-flight workers when the pool shuts down, in seconds.
SHUTDOWN_TIMEOUT = 120.0


class BatchDeletionService:
    """Deletes requests in batches, partitioned by storage account.

    Every account gets its own client and its own chunk cursor. All workers
    share one thread pool, so no more than ``max_workers`` batches are in
    flight at any time. Each chunk is claimed by exactly one worker.
    """

    def __init__(
        self,
        client_factory: Callable[[str], BlobBatchClientProtocol],
        batch_size: int,
        max_workers: int,
        snapshot_enabled: bool = False,
        batch_timeout: float = DEFAULT_BATCH_TIMEOUT,
        shutdown_timeout: float = SHUTDOWN_TIMEOUT,
    ) -> None:
        if batch_size <= 0 or batch_size > MAX_BATCH_SIZE:
            msg = f"batch_size must be between 1 and {MAX_BATCH_SIZE}, but was {batch_size}"
            raise ConfigurationError(msg)
        if max_workers <= 0:
            msg = "max_workers must be greater than zero"
            raise ConfigurationError(msg)
        self.client_factory = client_factory
        self.batch_size = batch_size
        self.max_workers = max_workers
        self.snapshot_enabled = snapshot_enabled
        self.batch_timeout = batch_timeout
        self.shutdown_timeout = shutdown_timeout

    def execute_source(self, source: RequestSourceProtocol) -> DeletionResult:
        """Read every request from a source and delete them."""
        requests = source.read_all()
        logger.info("loaded_delete_requests", count=len(requests), source=source.source_description)
        return self.execute(requests)

    def execute(self, requests: Sequence[DeleteRequest]) -> DeletionResult:
        """Delete all requests and return the merged outcome.

        Raises AccountSetupError, before any deletion is attempted, if a
        storage client cannot be created for one of the accounts.
        """
        if not requests:
            logger.info("no_delete_requests")
            return DeletionResult()

        requests_by_account = group_by_account(requests)
        logger.info("discovered_storage_accounts", count=len(requests_by_account))

        clients = {
            account: self._create_client(account) for account in requests_by_account
        }

        tracker = ProgressTracker(total=len(requests))
        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="blob-delete")
        futures: dict[Future[DeletionResult], str] = {}

        try:
            for account, account_requests in requests_by_account.items():
                cursor = ChunkCursor(account_requests, self.batch_size)
                worker_count = workers_for(len(account_requests), self.batch_size, self.max_workers)
                logger.info(
                    "account_scheduled",
                    account=account,
                    requests=len(account_requests),
                    workers=worker_count,
                )
                for _ in range(worker_count):
                    future = executor.submit(self._process_queue, account, clients[account], cursor)
                    futures[future] = account

            for future in as_completed(futures):
                account = futures[future]
                try:
                    tracker.record_result(future.result())
                except Exception:
                    logger.exception("batch_worker_failed", account=account)
                tracker.log_progress()
        finally:
            self._shutdown(executor, list(futures))

        result = tracker.to_result()
        logger.info(
            "batch_processing_completed",
            successful=result.success_count,
            failed=result.failure_count,
            elapsed=f"{tracker.elapsed_seconds:.1f}s",
        )
        return result

    def _create_client(self, account: str) -> BlobBatchClientProtocol:
        try:
            return self.client_factory(account)
        except Exception as exc:
            logger.error("account_client_creation_failed", account=account, error=str(exc))
            raise AccountSetupError(account, exc) from exc

    def _process_queue(
        self,
        account: str,
        client: BlobBatchClientProtocol,
        cursor: ChunkCursor,
    ) -> DeletionResult:
        """Claim and delete chunks until the account's cursor is exhausted."""
        result = DeletionResult()
        while (chunk := cursor.claim_chunk()) is not None:
            logger.debug("processing_batch", account=account, blob_count=len(chunk))
            task = BatchDeletionTask(client, chunk, self.snapshot_enabled, self.batch_timeout)
            result = result.merge(task.execute())
        return result

    def _shutdown(self, executor: ThreadPoolExecutor, futures: list[Future[DeletionResult]]) -> None:
        _done, not_done = wait(futures, timeout=self.shutdown_timeout)
        if not_done:
            logger.warning(
                "executor_did_not_terminate",
                timeout_seconds=self.shutdown_timeout,
                unfinished_workers=len(not_done),
            )
        executor.shutdown(wait=False, cancel_futures=True)
