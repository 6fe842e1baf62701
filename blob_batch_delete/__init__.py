"""Batch deletion of Azure Storage blobs listed in a delimited text source."""

__version__ = "0.1.0"
