"""Business logic for analysis commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from storelens.connectors import ConnectorFactory, load_into_store
from storelens.core.facade import AnalysisFacade
from storelens.core.store import InMemoryRecordStore
from storelens.utils.config import Config
from storelens.utils.logging import get_logger

logger = get_logger(__name__)


class AnalysisHandler:
    """Handler for analysis operations.

    Encapsulates business logic for analysis commands,
    keeping CLI commands thin and focused on user interaction.

    Example:
        >>> handler = AnalysisHandler(config)
        >>> store = handler.load_store("./data/store.json")
        >>> facade = handler.build_facade(store, threshold=0.6)
    """

    def __init__(self, config: Config):
        """Initialize handler.

        Args:
            config: Configuration instance
        """
        self.config = config

    def load_store(self, source: str, source_type: str = "auto") -> InMemoryRecordStore:
        """Load a file or directory of tables into a fresh in-memory store.

        Args:
            source: JSON file, JSON directory or CSV directory
            source_type: 'auto', 'json' or 'csv'

        Returns:
            Populated InMemoryRecordStore
        """
        store_config = self.config.get("store", {}) or {}
        store = InMemoryRecordStore(
            prefix=store_config.get("prefix", "lsdb_"),
            capacity_bytes=int(store_config.get("capacity_bytes", 5 * 1024 * 1024)),
        )

        connector = ConnectorFactory.from_path(source, source_type)
        names = load_into_store(connector, store)
        logger.info(f"Loaded {len(names)} tables from {source}")
        return store

    def analysis_config(self, sample_size: Optional[int] = None) -> Dict[str, Any]:
        """Analysis section of the config with CLI overrides applied."""
        analysis = dict(self.config.get("analysis", {}) or {})
        if sample_size is not None:
            analysis["sample_size"] = sample_size
        return analysis

    def build_facade(
        self,
        store: InMemoryRecordStore,
        threshold: Optional[float] = None,
        sample_size: Optional[int] = None,
    ) -> AnalysisFacade:
        """Create a facade over a store with CLI overrides applied.

        Args:
            store: Store to analyze
            threshold: Optional confidence threshold override
            sample_size: Optional sample size override

        Returns:
            AnalysisFacade
        """
        facade = AnalysisFacade(store, self.analysis_config(sample_size))
        if threshold is not None:
            facade.set_confidence_threshold(threshold)
        return facade

    @staticmethod
    def load_definition(path: str | Path) -> Any:
        """Read a schema definition from a JSON or YAML file."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yml", ".yaml"):
                return yaml.safe_load(f)
            return json.load(f)

    def to_json(self, data: Any) -> str:
        indent = self.config.get("output.indent", 2)
        return json.dumps(data, indent=indent, ensure_ascii=False, default=str)
