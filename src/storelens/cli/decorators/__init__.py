"""CLI decorators for common options and error handling."""

from storelens.cli.decorators.error_handling import handle_errors
from storelens.cli.decorators.options import (
    with_output_file,
    with_sample_size,
    with_source,
    with_threshold,
)

__all__ = [
    "handle_errors",
    "with_output_file",
    "with_sample_size",
    "with_source",
    "with_threshold",
]
