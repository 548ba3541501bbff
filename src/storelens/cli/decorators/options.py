"""Common CLI option decorators."""

from __future__ import annotations

import click


def with_source(f):
    """Add SOURCE argument and --source-type option to command.

    Example:
        @click.command()
        @with_source
        def my_command(source, source_type):
            pass
    """
    f = click.option(
        "--source-type",
        type=click.Choice(["auto", "json", "csv"], case_sensitive=False),
        default="auto",
        show_default=True,
        help="How to read SOURCE (json file/directory or csv directory)",
    )(f)
    return click.argument("source", type=click.Path(exists=True))(f)


def with_output_file(f):
    """Add --output option to command.

    Example:
        @click.command()
        @with_output_file
        def my_command(output):
            pass
    """
    return click.option(
        "--output",
        "-o",
        type=click.Path(),
        help="Output file path (default: stdout)",
    )(f)


def with_threshold(f):
    """Add --threshold option to command.

    Example:
        @click.command()
        @with_threshold
        def my_command(threshold):
            pass
    """
    return click.option(
        "--threshold",
        "-t",
        type=float,
        help="Minimum relationship confidence, 0..1 (default: from config)",
    )(f)


def with_sample_size(f):
    """Add --sample-size option to command."""
    return click.option(
        "--sample-size",
        "-n",
        type=click.IntRange(min=1),
        help="Records sampled per table (default: from config)",
    )(f)
