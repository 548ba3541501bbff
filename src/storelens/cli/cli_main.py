"""CLI entry point for storelens."""

from __future__ import annotations

import click

from storelens import __version__
from storelens.cli.commands import analyze, erd, schema, store
from storelens.utils.config import load_config
from storelens.utils.logging import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(exists=True),
    help="Path to config.yml file",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging level",
)
@click.pass_context
def cli(ctx, config, log_level):
    """storelens - Schema inference and relationship discovery for record stores.

    \b
    Examples:
        # Analyze a JSON dump of a key/value store
        storelens analyze ./data/store.json

        # Inferred schema of one table
        storelens schema ./data/store.json users

        # Mermaid ERD from a directory of CSV files
        storelens erd ./data/csv --format mermaid

        # Storage statistics
        storelens store ./data/store.json
    """
    ctx.ensure_object(dict)

    # Setup logging
    setup_logging(level=log_level)

    # Load config if provided
    if config:
        ctx.obj["config"] = load_config(config)


# Register commands
cli.add_command(analyze.analyze_cmd)
cli.add_command(schema.schema_cmd)
cli.add_command(erd.erd_cmd)
cli.add_command(store.store_cmd)


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
