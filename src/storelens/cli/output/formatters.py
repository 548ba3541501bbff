"""Output formatting utilities for CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import click

from storelens.core.relationships import Relationship


class OutputFormatter:
    """Format output for CLI display.

    Provides consistent formatting for different types of CLI output,
    including success messages, errors, warnings, and structured data.

    Example:
        >>> out = OutputFormatter()
        >>> out.success("Analysis completed")
        >>> out.stats({"tables": 2, "relationships": 1})
    """

    @staticmethod
    def success(message: str) -> None:
        """Display success message with checkmark."""
        click.echo(f"✓ {message}")

    @staticmethod
    def error(message: str, abort: bool = False) -> None:
        """Display error message.

        Args:
            message: Error message to display
            abort: Whether to abort command execution after displaying error
        """
        click.echo(f"❌ {message}", err=True)
        if abort:
            raise click.Abort()

    @staticmethod
    def warning(message: str) -> None:
        """Display warning message on stderr."""
        click.echo(f"⚠️  {message}", err=True)

    @staticmethod
    def section(title: str) -> None:
        click.echo(f"\n{title}")

    @staticmethod
    def stats(stats_dict: Dict[str, Any], indent: str = "   ") -> None:
        """Display statistics dictionary in key: value format.

        Args:
            stats_dict: Dictionary of statistics to display
            indent: Indentation string for each line
        """
        for key, value in stats_dict.items():
            click.echo(f"{indent}{key}: {value}")

    @staticmethod
    def table_summary(
        table_name: str,
        row_count: int,
        col_count: int,
        primary_key: Optional[str] = None,
        indent: str = "   ",
    ) -> None:
        """Display table summary in consistent format.

        Args:
            table_name: Name of the table
            row_count: Number of records
            col_count: Number of columns
            primary_key: Primary key candidate (if any)
            indent: Indentation string
        """
        pk_str = f", PK={primary_key}" if primary_key else ""
        click.echo(
            f"{indent}✓ {table_name}: {row_count} records, {col_count} columns{pk_str}"
        )

    @staticmethod
    def relationship(rel: Relationship, indent: str = "   ") -> None:
        """Display one relationship with a confidence marker."""
        icon = "✓" if rel.confidence >= 0.8 else "⚠"
        click.echo(
            f"{indent}{icon} {rel.from_table}.{rel.from_column} → "
            f"{rel.to_table}.{rel.to_column} ({rel.type.value}, "
            f"confidence: {rel.confidence:.0%})"
        )

    @staticmethod
    def emit(text: str, output: Optional[str] = None) -> None:
        """Write text to a file, or to stdout when no file is given.

        Args:
            text: Content to write
            output: Optional output file path
        """
        if output:
            path = Path(output)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
            click.echo(f"✓ Wrote {path}", err=True)
        else:
            click.echo(text)
