"""Shared test fixtures for batch blob deletion."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any

import pytest

from blob_batch_delete.models.batch_item import (
    BatchItemResponse,
    SnapshotOutcome,
    SnapshotStatus,
)
from blob_batch_delete.models.delete_request import DeleteRequest


class ConcurrencyProbe:
    """Counts batch submissions running at the same time."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.active = 0
        self.max_active = 0

    def enter(self) -> None:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)

    def leave(self) -> None:
        with self._lock:
            self.active -= 1


class FakeDeleteBatch:
    """In-memory batch that refuses blob names listed as rejected."""

    def __init__(self, rejected: set[str]) -> None:
        self.targets: list[tuple[str, str]] = []
        self._rejected = rejected

    def add(self, container: str, blob_name: str) -> None:
        if blob_name in self._rejected:
            msg = f"cannot queue {blob_name}"
            raise ValueError(msg)
        self.targets.append((container, blob_name))

    def __len__(self) -> int:
        return len(self.targets)


class FakeBlobBatchClient:
    """Stand-in for AzureBlobBatchClient that records every call.

    ``statuses`` maps blob names to the sub-response status returned for
    them (202 by default).
    """

    def __init__(
        self,
        account: str = "acct",
        statuses: dict[str, int] | None = None,
        submit_error: Exception | None = None,
        rejected: set[str] | None = None,
        response_limit: int | None = None,
        snapshot_statuses: dict[str, SnapshotStatus] | None = None,
        snapshot_error: Exception | None = None,
        delay: float = 0.0,
        probe: ConcurrencyProbe | None = None,
    ) -> None:
        self.account = account
        self.statuses = statuses or {}
        self.submit_error = submit_error
        self.rejected = rejected or set()
        self.response_limit = response_limit
        self.snapshot_statuses = snapshot_statuses or {}
        self.snapshot_error = snapshot_error
        self.delay = delay
        self.probe = probe or ConcurrencyProbe()
        self.submitted_batches: list[list[tuple[str, str]]] = []
        self.timeouts: list[float] = []
        self.snapshot_calls: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def new_batch(self) -> FakeDeleteBatch:
        return FakeDeleteBatch(self.rejected)

    def submit_batch(self, batch: FakeDeleteBatch, timeout: float) -> list[BatchItemResponse]:
        with self._lock:
            self.submitted_batches.append(list(batch.targets))
            self.timeouts.append(timeout)
        self.probe.enter()
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.submit_error is not None:
                raise self.submit_error
            responses = []
            for _container, blob_name in batch.targets:
                status = self.statuses.get(blob_name, 202)
                responses.append(
                    BatchItemResponse(
                        status_code=status,
                        error_code=None if 200 <= status < 300 else "BlobNotFound",
                        message=None if 200 <= status < 300 else "The specified blob does not exist.",
                    )
                )
            if self.response_limit is not None:
                responses = responses[: self.response_limit]
            return responses
        finally:
            self.probe.leave()

    def create_snapshot(self, container: str, blob_name: str) -> SnapshotOutcome:
        self.snapshot_calls.append((container, blob_name))
        if self.snapshot_error is not None:
            raise self.snapshot_error
        status = self.snapshot_statuses.get(blob_name, SnapshotStatus.CREATED)
        snapshot_id = "2024-01-01T00:00:00.0000000Z" if status is SnapshotStatus.CREATED else None
        return SnapshotOutcome(status=status, snapshot_id=snapshot_id)

    @property
    def batch_sizes(self) -> list[int]:
        return [len(batch) for batch in self.submitted_batches]


@pytest.fixture
def make_request() -> Callable[..., DeleteRequest]:
    """Factory for delete requests with a generated raw line."""

    def _make(
        blob_name: str,
        account: str = "acct",
        container: str = "container-a",
        line_number: int = 2,
    ) -> DeleteRequest:
        return DeleteRequest(
            account=account,
            container=container,
            blob_name=blob_name,
            line_number=line_number,
            raw_line=f"{account},{container},{blob_name}",
        )

    return _make


@pytest.fixture
def make_requests(make_request: Callable[..., DeleteRequest]) -> Callable[..., list[DeleteRequest]]:
    """Factory for ``count`` requests in one account with consecutive line numbers."""

    def _make(count: int, account: str = "acct", first_line: int = 2) -> list[DeleteRequest]:
        return [
            make_request(f"{account}-blob-{i}.txt", account=account, line_number=first_line + i)
            for i in range(count)
        ]

    return _make


@pytest.fixture
def fake_client() -> FakeBlobBatchClient:
    """A fake client where every deletion succeeds."""
    return FakeBlobBatchClient()


@pytest.fixture
def client_registry() -> dict[str, Any]:
    """Per-account fake clients created on demand, sharing one concurrency probe.

    Use ``registry["factory"]`` as the service's client factory and
    ``registry["clients"][account]`` to inspect calls afterwards. Options in
    ``registry["options"]`` are passed to every new client.
    """
    registry: dict[str, Any] = {
        "clients": {},
        "options": {},
        "probe": ConcurrencyProbe(),
    }

    def factory(account: str) -> FakeBlobBatchClient:
        client = FakeBlobBatchClient(account=account, probe=registry["probe"], **registry["options"])
        registry["clients"][account] = client
        return client

    registry["factory"] = factory
    return registry


@pytest.fixture
def make_client() -> Callable[..., FakeBlobBatchClient]:
    """Constructor for fake clients with custom behaviour."""
    return FakeBlobBatchClient
