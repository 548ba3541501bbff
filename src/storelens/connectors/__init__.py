"""Data connectors for storelens."""

from storelens.connectors.base import BaseConnector
from storelens.connectors.csv_loader import CSVLoader
from storelens.connectors.json_loader import JSONLoader
from storelens.connectors.registry import (
    CONNECTOR_REGISTRY,
    ConnectorFactory,
    load_into_store,
)

__all__ = [
    "BaseConnector",
    "CSVLoader",
    "JSONLoader",
    "ConnectorFactory",
    "CONNECTOR_REGISTRY",
    "load_into_store",
]
