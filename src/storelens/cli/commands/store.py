"""Store statistics command."""

from __future__ import annotations

import click

from storelens.cli.decorators import handle_errors, with_source
from storelens.cli.handlers import AnalysisHandler
from storelens.cli.output import OutputFormatter
from storelens.utils.config import get_config

out = OutputFormatter()


@click.command(name="store")
@with_source
@handle_errors
@click.pass_context
def store_cmd(ctx, source, source_type):
    """Show storage statistics and the tables loaded from SOURCE.

    \b
    Examples:
        storelens store ./data/store.json
    """
    handler = AnalysisHandler(get_config())
    store = handler.load_store(source, source_type)
    stats = store.get_storage_stats()

    out.section("💾 Storage:")
    out.stats(
        {
            "Used": f"{stats.total_size} bytes ({stats.used_percent:.1f}%)",
            "Available": f"{stats.available_space} bytes",
            "Limit": f"{stats.estimated_limit} bytes",
            "Keys": stats.used_keys,
        }
    )

    out.section("   Tables:")
    for name in store.list_table_names():
        meta = store.get_metadata(name)
        click.echo(
            f"     - {name}: {store.get_record_count(name)} records, "
            f"{meta.size} bytes, {meta.type}"
        )
