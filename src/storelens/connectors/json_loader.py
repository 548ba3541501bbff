"""JSON connector for loading tables from JSON files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from storelens.connectors.base import BaseConnector
from storelens.utils.logging import get_logger

logger = get_logger(__name__)


class JSONLoader(BaseConnector):
    """Load tables from JSON.

    The path is either a single JSON file holding an object of
    ``{table_name: value}`` or a directory of ``*.json`` files, where
    each file is one table named after the file.
    """

    def __init__(self, path: str | Path, file_pattern: str = "*.json"):
        """Initialize JSON loader.

        Args:
            path: JSON file or directory of JSON files
            file_pattern: Glob pattern for JSON files in a directory

        Example:
            >>> loader = JSONLoader("./data/store.json")
            >>> loader.get_table_names()
            ['orders', 'users']
        """
        super().__init__(path=path, file_pattern=file_pattern)

        self.path = Path(path)
        self.file_pattern = file_pattern

        if not self.path.exists():
            raise FileNotFoundError(f"JSON source not found: {self.path}")

    @staticmethod
    def _read(json_file: Path) -> Any:
        with open(json_file, "r", encoding="utf-8") as f:
            return json.load(f)

    def _json_files(self) -> List[Path]:
        return sorted(self.path.glob(self.file_pattern))

    def load_tables(self) -> Dict[str, Any]:
        """Load every table from the file or directory.

        Returns:
            Dict mapping table_name -> stored value

        Raises:
            ValueError: If a single file does not hold a JSON object, or a
                directory has no JSON files
        """
        if self.path.is_dir():
            json_files = self._json_files()
            if not json_files:
                raise ValueError(
                    f"No JSON files found in {self.path} "
                    f"matching pattern '{self.file_pattern}'"
                )

            self.logger.info(f"Found {len(json_files)} JSON files in {self.path}")
            tables = {}
            for json_file in json_files:
                self.logger.debug(f"Loading {json_file.name} as table '{json_file.stem}'")
                tables[json_file.stem] = self._read(json_file)
            return tables

        data = self._read(self.path)
        if not isinstance(data, dict):
            raise ValueError(
                f"{self.path} must hold a JSON object mapping table names to "
                f"values, got {type(data).__name__}"
            )

        self.logger.info(f"Loaded {len(data)} tables from {self.path}")
        return data

    def get_table_names(self) -> List[str]:
        """Get list of table names without loading their values."""
        if self.path.is_dir():
            return [f.stem for f in self._json_files()]
        return list(self.load_tables())
