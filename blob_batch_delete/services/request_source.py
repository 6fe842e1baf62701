"""Delimited text reader producing delete requests."""

from __future__ import annotations

import io
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import structlog

from blob_batch_delete.core.line_parsing import MIN_FIELDS, split_fields
from blob_batch_delete.exceptions import SourceUnavailableError
from blob_batch_delete.models.delete_request import DeleteRequest

if TYPE_CHECKING:
    from collections.abc import Callable

logger = structlog.get_logger(__name__)

INLINE_SOURCE_DESCRIPTION = "inline CSV content"


class CsvRequestSource:
    """Reads ``account,container,blob`` lines from a file or an inline string.

    Malformed lines are logged and skipped. When ``default_account`` is set,
    two-field ``container,blob`` lines are accepted and assigned to it.
    """

    def __init__(
        self,
        open_fn: Callable[[], TextIO],
        source_description: str,
        separator: str = ",",
        has_header: bool = True,
        default_account: str | None = None,
    ) -> None:
        self._open = open_fn
        self._source_description = source_description
        self.separator = separator or ","
        self.has_header = has_header
        self.default_account = default_account
        self.skipped_lines = 0

    @classmethod
    def for_file(
        cls,
        path: str | Path,
        separator: str = ",",
        has_header: bool = True,
        default_account: str | None = None,
    ) -> CsvRequestSource:
        csv_path = Path(path)
        return cls(
            lambda: csv_path.open(encoding="utf-8", newline=""),
            str(csv_path),
            separator,
            has_header,
            default_account,
        )

    @classmethod
    def for_content(
        cls,
        content: str,
        separator: str = ",",
        has_header: bool = True,
        default_account: str | None = None,
    ) -> CsvRequestSource:
        return cls(
            lambda: io.StringIO(content, newline=None),
            INLINE_SOURCE_DESCRIPTION,
            separator,
            has_header,
            default_account,
        )

    @property
    def source_description(self) -> str:
        return self._source_description

    def read_all(self) -> list[DeleteRequest]:
        """Parse every line of the source, in order.

        Raises SourceUnavailableError if the source cannot be opened or read.
        """
        requests: list[DeleteRequest] = []
        self.skipped_lines = 0

        try:
            with self._open() as handle:
                for line_number, line in enumerate(handle, start=1):
                    if line_number == 1 and self.has_header:
                        continue
                    request = self._parse_line(line.rstrip("\r\n"), line_number)
                    if request is None:
                        self.skipped_lines += 1
                    else:
                        requests.append(request)
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Unable to read delete requests from {self._source_description}: {exc}"
            raise SourceUnavailableError(msg) from exc

        if self.skipped_lines:
            logger.warning(
                "skipped_invalid_lines",
                source=self._source_description,
                skipped=self.skipped_lines,
            )
        return requests

    def _parse_line(self, line: str, line_number: int) -> DeleteRequest | None:
        if not line.strip():
            logger.warning("skipping_empty_line", line_number=line_number, source=self._source_description)
            return None

        fields = split_fields(line, self.separator)
        if len(fields) == MIN_FIELDS - 1 and self.default_account:
            fields = [self.default_account, *fields]

        if len(fields) < MIN_FIELDS:
            logger.error(
                "invalid_csv_line",
                line_number=line_number,
                source=self._source_description,
                reason=f"expected at least {MIN_FIELDS} fields but found {len(fields)}",
                line=line,
            )
            return None

        account, container, blob_name = fields[:MIN_FIELDS]
        if not account or not container or not blob_name:
            logger.error(
                "invalid_csv_line",
                line_number=line_number,
                source=self._source_description,
                reason="storage account, container or blob name missing",
                line=line,
            )
            return None

        return DeleteRequest(
            account=account,
            container=container,
            blob_name=blob_name,
            line_number=line_number,
            raw_line=line,
        )
