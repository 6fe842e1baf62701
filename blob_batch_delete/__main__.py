from blob_batch_delete.cli import cli

cli()
