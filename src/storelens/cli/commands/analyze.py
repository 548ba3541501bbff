"""Full analysis command: schemas, keys and relationships."""

from __future__ import annotations

import click

from storelens.cli.decorators import (
    handle_errors,
    with_output_file,
    with_sample_size,
    with_source,
    with_threshold,
)
from storelens.cli.handlers import AnalysisHandler
from storelens.cli.output import OutputFormatter
from storelens.core.facade import AnalysisReport
from storelens.utils.config import get_config
from storelens.utils.logging import get_logger

logger = get_logger(__name__)
out = OutputFormatter()


def _print_report(report: AnalysisReport) -> None:
    stats = report.statistics
    out.section("📊 Analysis Summary:")
    out.stats(
        {
            "Tables": stats.total_tables,
            "Tables with data": stats.tables_with_data,
            "Relationships": stats.relationships_found,
        }
    )

    if report.tables:
        out.section("   Tables:")
        for name, analysis in report.tables.items():
            out.table_summary(
                name,
                analysis.record_count,
                len(analysis.columns),
                analysis.primary_key_candidate,
                indent="     ",
            )

    if report.relationships:
        out.section("   Relationships:")
        for rel in report.relationships:
            out.relationship(rel, indent="     ")

    distribution = stats.confidence_distribution
    if any(distribution.values()):
        out.section("   Confidence:")
        out.stats(distribution, indent="     ")

    for warning in report.warnings:
        out.warning(warning)


@click.command(name="analyze")
@with_source
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    help="Output format (default: output.format from config)",
)
@with_output_file
@with_threshold
@with_sample_size
@handle_errors
@click.pass_context
def analyze_cmd(ctx, source, source_type, output_format, output, threshold, sample_size):
    """Analyze all tables: infer schemas and discover relationships.

    \b
    Examples:
        # Summary of a JSON store dump
        storelens analyze ./data/store.json

        # Full report as JSON
        storelens analyze ./data/csv --format json -o report.json

        # Only keep confident relationships
        storelens analyze ./data/store.json --threshold 0.8
    """
    config = get_config()
    handler = AnalysisHandler(config)
    output_format = (output_format or config.get("output.format", "text")).lower()

    store = handler.load_store(source, source_type)
    facade = handler.build_facade(store, threshold=threshold, sample_size=sample_size)
    report = facade.analyze_all_tables()

    if output_format == "json":
        out.emit(handler.to_json(report.to_dict()), output)
        return

    if output:
        # Text summary goes to the terminal; the file gets the full report
        out.emit(handler.to_json(report.to_dict()), output)
    _print_report(report)
