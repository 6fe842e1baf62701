"""Exceptions raised by the batch deletion pipeline.

Only source, configuration and account setup errors are fatal to a run.
Per-item and per-batch failures are recorded in the result instead.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when the run configuration is invalid."""


class SourceUnavailableError(Exception):
    """Raised when the request source cannot be read."""


class AccountSetupError(Exception):
    """Raised when the storage client for an account cannot be created."""

    def __init__(self, account: str, cause: BaseException) -> None:
        super().__init__(f"Failed to create storage client for account {account}: {cause}")
        self.account = account


class BatchSubmissionError(Exception):
    """Raised when a whole batch delete call fails."""
