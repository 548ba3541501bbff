"""CLI output helpers."""

from storelens.cli.output.formatters import OutputFormatter

__all__ = ["OutputFormatter"]
