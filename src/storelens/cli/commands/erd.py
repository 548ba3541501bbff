"""Entity-relationship diagram export command."""

from __future__ import annotations

import click

from storelens.cli.decorators import (
    handle_errors,
    with_output_file,
    with_source,
    with_threshold,
)
from storelens.cli.handlers import AnalysisHandler
from storelens.cli.output import OutputFormatter
from storelens.core.relationships import to_mermaid
from storelens.utils.config import get_config
from storelens.utils.logging import get_logger

logger = get_logger(__name__)
out = OutputFormatter()


@click.command(name="erd")
@with_source
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["json", "mermaid"], case_sensitive=False),
    default="json",
    show_default=True,
    help="Diagram format",
)
@with_output_file
@with_threshold
@handle_errors
@click.pass_context
def erd_cmd(ctx, source, source_type, output_format, output, threshold):
    """Export tables and relationships as an ERD.

    \b
    Examples:
        # Node/edge JSON
        storelens erd ./data/store.json -o erd.json

        # Mermaid erDiagram
        storelens erd ./data/csv --format mermaid
    """
    config = get_config()
    handler = AnalysisHandler(config)

    store = handler.load_store(source, source_type)
    erd = handler.build_facade(store, threshold=threshold).generate_erd()

    if output_format.lower() == "mermaid":
        out.emit(to_mermaid(erd), output)
    else:
        out.emit(handler.to_json(erd.to_dict()), output)
