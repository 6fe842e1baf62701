"""Request grouping and lock-free chunk claiming."""

from __future__ import annotations

import itertools
import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from blob_batch_delete.models.delete_request import DeleteRequest


def group_by_account(requests: Iterable[DeleteRequest]) -> dict[str, list[DeleteRequest]]:
    """Stable group-by on the account, keeping each group's input order."""
    grouped: dict[str, list[DeleteRequest]] = {}
    for request in requests:
        grouped.setdefault(request.account, []).append(request)
    return grouped


def workers_for(request_count: int, batch_size: int, max_workers: int) -> int:
    """Number of workers worth starting for one account.

    Never more than the number of chunks the account's requests split into.
    """
    chunk_count = max(1, math.ceil(request_count / batch_size))
    return min(max_workers, chunk_count)


def chunk_bounds(request_count: int, batch_size: int) -> list[tuple[int, int]]:
    """All ``[start, end)`` ranges for an account, in claim order."""
    return [
        (start, min(start + batch_size, request_count))
        for start in range(0, request_count, batch_size)
    ]


class ChunkCursor:
    """Shared cursor handing out contiguous chunks of one account's requests.

    ``claim`` advances the cursor with a single ``next()`` on an
    ``itertools.count``, which the interpreter executes atomically, so
    concurrent workers never receive the same start index and never wait on
    each other.

    That atomicity comes from the GIL. Free-threaded (``3.13t``) builds make
    no such guarantee for ``itertools.count`` and are not supported.
    """

    def __init__(self, requests: Sequence[DeleteRequest], batch_size: int) -> None:
        if batch_size <= 0:
            msg = "batch_size must be greater than zero"
            raise ValueError(msg)
        self._requests = requests
        self._batch_size = batch_size
        self._starts = itertools.count(0, batch_size)

    @property
    def request_count(self) -> int:
        return len(self._requests)

    def claim(self) -> tuple[int, int] | None:
        """Claim the next ``[start, end)`` range, or None when exhausted."""
        start = next(self._starts)
        if start >= len(self._requests):
            return None
        return start, min(start + self._batch_size, len(self._requests))

    def claim_chunk(self) -> list[DeleteRequest] | None:
        """Claim the next chunk as a fresh list of requests."""
        bounds = self.claim()
        if bounds is None:
            return None
        start, end = bounds
        return list(self._requests[start:end])
