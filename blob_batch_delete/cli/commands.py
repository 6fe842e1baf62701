"""CLI command implementations for batch blob deletion."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

import click
from pydantic import ValidationError

from blob_batch_delete.core.chunking import chunk_bounds, group_by_account
from blob_batch_delete.core.line_parsing import unescape_inline_content
from blob_batch_delete.exceptions import (
    AccountSetupError,
    ConfigurationError,
    SourceUnavailableError,
)
from blob_batch_delete.models.config import MAX_BATCH_SIZE, Config
from blob_batch_delete.services.request_source import CsvRequestSource
from blob_batch_delete.utils.logger import configure_logging, get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from blob_batch_delete.services.protocols import BlobBatchClientProtocol

logger = get_logger(__name__)

_FATAL_ERRORS = (ConfigurationError, SourceUnavailableError, AccountSetupError)


def _get_config(env_file: str | None, **overrides: Any) -> Config:
    """Load configuration from env/.env, with CLI values taking precedence."""
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        if env_file:
            return Config(_env_file=env_file, **values)  # type: ignore[call-arg]
        return Config(**values)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc


def _build_source(config: Config) -> CsvRequestSource:
    config.require_input_source()
    if config.input_csv_content is not None:
        return CsvRequestSource.for_content(
            config.input_csv_content,
            separator=config.csv_separator,
            has_header=config.csv_has_header,
            default_account=config.storage_endpoint,
        )
    return CsvRequestSource.for_file(
        config.input_file_path or "",
        separator=config.csv_separator,
        has_header=config.csv_has_header,
        default_account=config.storage_endpoint,
    )


def _azure_client_factory() -> Callable[[str], BlobBatchClientProtocol]:
    """Build a per-account client factory sharing one Azure credential."""
    from azure.identity import DefaultAzureCredential

    from blob_batch_delete.services.azure_blob_client import AzureBlobBatchClient

    credential = DefaultAzureCredential()

    def factory(account: str) -> BlobBatchClientProtocol:
        return AzureBlobBatchClient.for_account(account, credential)

    return factory


def _parse_bool(_ctx: click.Context, _param: click.Parameter, value: str | None) -> bool | None:
    if value is None:
        return None
    return value.lower() == "true"


def _input_overrides(input_file: str | None, input_data: str | None) -> dict[str, str]:
    """CLI input replaces whichever input the env or .env file configured."""
    if input_file and input_data:
        msg = "--input-file and --input-data cannot be used together"
        raise click.UsageError(msg)
    if input_file:
        return {"input_file_path": input_file, "input_csv_content": ""}
    if input_data:
        return {"input_file_path": "", "input_csv_content": unescape_inline_content(input_data)}
    return {}


_SINGLE_RESPONSE_FLAGS = frozenset({"--single-response", "-sr"})


class SingleResponseCommand(click.Command):
    """Command whose option errors exit 0 silently when single-response mode is requested."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        # The parser consumes ``args`` in place.
        single_response = any(arg in _SINGLE_RESPONSE_FLAGS for arg in args)
        try:
            return super().parse_args(ctx, args)
        except click.UsageError:
            if single_response:
                ctx.exit(0)
            raise


_env_file_option = click.option(
    "--env-file", "-c", type=click.Path(dir_okay=False), help="Path to a .env configuration file"
)
_input_file_option = click.option("--input-file", "-f", help="Override input CSV file path")
_input_data_option = click.option(
    "--input-data", "-d", help="Inline CSV data; \\n, \\r, \\t and \\\\ are unescaped"
)


@click.command(cls=SingleResponseCommand)
@_env_file_option
@_input_file_option
@_input_data_option
@click.option(
    "--batch-size",
    "-b",
    type=click.IntRange(1, MAX_BATCH_SIZE),
    help=f"Override batch size (max {MAX_BATCH_SIZE})",
)
@click.option("--threads", "-t", type=click.IntRange(min=1), help="Override thread pool size")
@click.option(
    "--snapshot-enabled",
    "-s",
    type=click.Choice(["true", "false"], case_sensitive=False),
    callback=_parse_bool,
    help="Override snapshot creation before delete",
)
@click.option(
    "--single-response",
    "-sr",
    is_flag=True,
    help="Exit with 1 on success and 0 on failure, suppressing output",
)
def run(
    env_file: str | None,
    input_file: str | None,
    input_data: str | None,
    batch_size: int | None,
    threads: int | None,
    snapshot_enabled: bool | None,
    single_response: bool,
) -> None:
    """Delete every blob listed in the input."""
    from blob_batch_delete.services.batch_deletion_service import BatchDeletionService

    configure_logging()

    try:
        inputs = _input_overrides(input_file, input_data)
        config = _get_config(
            env_file,
            **inputs,
            batch_size=batch_size,
            thread_pool_size=threads,
            snapshot_enabled=snapshot_enabled,
        )
        configure_logging(config.log_level)
        source = _build_source(config)
        logger.info("starting_batch_blob_delete", source=source.source_description)

        service = BatchDeletionService(
            _azure_client_factory(),
            batch_size=config.batch_size,
            max_workers=config.thread_pool_size,
            snapshot_enabled=config.snapshot_enabled,
        )
        result = service.execute_source(source)
    except click.UsageError:
        if single_response:
            sys.exit(0)
        raise
    except _FATAL_ERRORS as exc:
        logger.error("application_failed", error=str(exc))
        if not single_response:
            click.echo(f"Error: {exc}", err=True)
        sys.exit(0 if single_response else 1)
    except Exception as exc:
        logger.exception("application_failed")
        if not single_response:
            click.echo(f"Error: unexpected failure: {exc}", err=True)
        sys.exit(0 if single_response else 1)

    if not single_response:
        for message in result.failure_messages:
            click.echo(message)
        for message in result.success_messages:
            click.echo(message)

    if result.has_failures:
        logger.error("batch_completed_with_failures", failed=result.failure_count)
        sys.exit(0 if single_response else 1)
    if single_response:
        sys.exit(1)


@click.command()
@_env_file_option
@_input_file_option
@_input_data_option
@click.option("--batch-size", "-b", type=click.IntRange(1, MAX_BATCH_SIZE), help="Override batch size")
def check_input(
    env_file: str | None,
    input_file: str | None,
    input_data: str | None,
    batch_size: int | None,
) -> None:
    """Parse the input and show the planned batches without deleting anything."""
    configure_logging()
    inputs = _input_overrides(input_file, input_data)
    try:
        config = _get_config(
            env_file,
            **inputs,
            batch_size=batch_size,
        )
        configure_logging(config.log_level)
        source = _build_source(config)
        requests = source.read_all()
    except (ConfigurationError, SourceUnavailableError) as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"[INFO] Source: {source.source_description}")
    click.echo(f"  requests: {len(requests)}")
    click.echo(f"  skipped lines: {source.skipped_lines}")
    for account, account_requests in group_by_account(requests).items():
        batches = len(chunk_bounds(len(account_requests), config.batch_size))
        click.echo(f"  {account}: {len(account_requests)} request(s) in {batches} batch(es)")
