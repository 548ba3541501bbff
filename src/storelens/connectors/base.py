"""Base connector interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from storelens.utils.logging import get_logger

logger = get_logger(__name__)


class BaseConnector(ABC):
    """Abstract base class for data connectors.

    A connector reads tables from some outside source as JSON-compatible
    values (one list of records per table) ready to be put in a record
    store.
    """

    def __init__(self, **kwargs):
        """Initialize connector.

        Args:
            **kwargs: Connector-specific configuration
        """
        self.config = kwargs
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def load_tables(self) -> Dict[str, Any]:
        """Load tables into memory.

        Returns:
            Dict mapping table_name -> JSON-compatible value

        Raises:
            NotImplementedError: Must be implemented by subclasses
        """
        pass

    @abstractmethod
    def get_table_names(self) -> List[str]:
        """Get list of available table names.

        Returns:
            List of table names

        Raises:
            NotImplementedError: Must be implemented by subclasses
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.config})"
