"""Services that read requests and talk to storage."""
