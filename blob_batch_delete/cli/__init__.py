"""CLI entry point for batch blob deletion."""

from __future__ import annotations

import click

from blob_batch_delete.cli.commands import check_input, run


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def cli() -> None:
    """Delete Azure Storage blobs listed in a CSV file, in batches."""


cli.add_command(run)
cli.add_command(check_input)
