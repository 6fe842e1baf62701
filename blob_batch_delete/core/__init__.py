"""Pure functions for chunking, parsing and formatting."""
