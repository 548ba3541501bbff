"""Command-line interface for storelens."""
