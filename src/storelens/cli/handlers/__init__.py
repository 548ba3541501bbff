"""CLI command handlers containing business logic."""

from storelens.cli.handlers.analysis_handler import AnalysisHandler

__all__ = ["AnalysisHandler"]
