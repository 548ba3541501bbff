"""Schema inspection and definition command."""

from __future__ import annotations

import click

from storelens.cli.decorators import handle_errors, with_output_file, with_source
from storelens.cli.handlers import AnalysisHandler
from storelens.cli.output import OutputFormatter
from storelens.utils.config import get_config
from storelens.utils.logging import get_logger

logger = get_logger(__name__)
out = OutputFormatter()


@click.command(name="schema")
@with_source
@click.argument("table")
@click.option(
    "--define",
    "-d",
    "definition_file",
    type=click.Path(exists=True),
    help="JSON or YAML schema definition to apply and validate the table against",
)
@with_output_file
@handle_errors
@click.pass_context
def schema_cmd(ctx, source, source_type, table, definition_file, output):
    """Show the schema of TABLE, inferred or user-defined.

    \b
    Examples:
        # Inferred schema
        storelens schema ./data/store.json users

        # Apply a schema and validate the stored records against it
        storelens schema ./data/store.json users --define users_schema.yml
    """
    config = get_config()
    handler = AnalysisHandler(config)

    store = handler.load_store(source, source_type)
    manager = handler.build_facade(store).schema_manager

    if not store.has_table(table):
        out.error(f"Table '{table}' not found in {source}", abort=True)

    if definition_file:
        definition = handler.load_definition(definition_file)
        manager.define_schema(table, definition)
        out.success(f"Schema for '{table}' is valid")

        result = manager.validate_data(table)
        if result.valid:
            out.success(f"All records in '{table}' match the schema")
        else:
            out.warning(f"{len(result.errors)} validation error(s) in '{table}':")
            for error in result.errors:
                out.warning(f"  {error}")

    schema = manager.get_effective_schema(table)
    if schema is None:
        out.error(f"Table '{table}' has no records to infer a schema from", abort=True)

    for warning in schema.warnings:
        out.warning(warning)

    out.emit(handler.to_json(schema.to_dict()), output)
