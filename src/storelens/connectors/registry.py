"""Connector registry and factory."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Type

from storelens.connectors.base import BaseConnector
from storelens.connectors.csv_loader import CSVLoader
from storelens.connectors.json_loader import JSONLoader
from storelens.core.store import InMemoryRecordStore
from storelens.utils.logging import get_logger

logger = get_logger(__name__)

# Registry of available connectors
CONNECTOR_REGISTRY: Dict[str, Type[BaseConnector]] = {
    "json": JSONLoader,
    "csv": CSVLoader,
}


class ConnectorFactory:
    """Factory for creating connector instances."""

    @staticmethod
    def create_connector(
        connector_type: str,
        **kwargs,
    ) -> BaseConnector:
        """Create connector instance.

        Args:
            connector_type: Connector type ('json', 'csv')
            **kwargs: Connector-specific configuration

        Returns:
            BaseConnector instance

        Raises:
            ValueError: If connector type is not supported

        Example:
            >>> connector = ConnectorFactory.create_connector(
            ...     "csv",
            ...     data_dir="./data/csv",
            ... )
        """
        connector_type_lower = connector_type.lower().strip()

        if connector_type_lower not in CONNECTOR_REGISTRY:
            available = ", ".join(sorted(CONNECTOR_REGISTRY.keys()))
            raise ValueError(
                f"Unknown connector type: {connector_type}. "
                f"Available: {available}"
            )

        connector_class = CONNECTOR_REGISTRY[connector_type_lower]
        logger.info(f"Creating {connector_class.__name__} connector")

        return connector_class(**kwargs)

    @staticmethod
    def from_path(path: str | Path, source_type: str = "auto") -> BaseConnector:
        """Create a connector for a file or directory.

        With ``auto``, a directory holding CSV files but no JSON files is
        read as CSV; everything else is read as JSON.

        Args:
            path: Source file or directory
            source_type: 'auto', 'json' or 'csv'

        Returns:
            BaseConnector instance
        """
        path = Path(path)
        source_type = source_type.lower().strip()

        if source_type == "auto":
            source_type = "json"
            if path.is_dir() and not any(path.glob("*.json")) and any(path.glob("*.csv")):
                source_type = "csv"
            elif path.is_file() and path.suffix.lower() == ".csv":
                raise ValueError(
                    f"CSV sources must be a directory of CSV files, got {path}"
                )

        if source_type == "csv":
            return ConnectorFactory.create_connector("csv", data_dir=path)
        return ConnectorFactory.create_connector(source_type, path=path)

    @staticmethod
    def register_connector(name: str, connector_class: Type[BaseConnector]) -> None:
        """Register a custom connector.

        Args:
            name: Connector name
            connector_class: Connector class (must inherit from BaseConnector)
        """
        if not issubclass(connector_class, BaseConnector):
            raise TypeError(
                f"Connector class must inherit from BaseConnector, "
                f"got {connector_class}"
            )

        CONNECTOR_REGISTRY[name.lower()] = connector_class
        logger.info(f"Registered custom connector: {name}")

    @staticmethod
    def list_connectors() -> List[str]:
        """List available connector types."""
        return sorted(set(CONNECTOR_REGISTRY.keys()))


def load_into_store(
    connector: BaseConnector, store: InMemoryRecordStore
) -> List[str]:
    """Put every table a connector loads into a store.

    Args:
        connector: Source connector
        store: Destination store

    Returns:
        Names of the tables written, in load order
    """
    tables = connector.load_tables()
    for table_name, value in tables.items():
        store.put(table_name, value)

    logger.info(f"Loaded {len(tables)} tables into {store!r}")
    return list(tables)
