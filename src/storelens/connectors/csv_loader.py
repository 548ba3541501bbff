"""CSV connector for loading tables from CSV files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from storelens.connectors.base import BaseConnector
from storelens.utils.logging import get_logger

logger = get_logger(__name__)


def dataframe_to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Convert a DataFrame to plain records, with NaN as None."""
    return json.loads(df.to_json(orient="records", double_precision=15))


class CSVLoader(BaseConnector):
    """Load tables from a directory of CSV files, one table per file."""

    def __init__(
        self,
        data_dir: str | Path,
        file_pattern: str = "*.csv",
        **pandas_kwargs,
    ):
        """Initialize CSV loader.

        Args:
            data_dir: Directory containing CSV files
            file_pattern: Glob pattern for CSV files
            **pandas_kwargs: Additional arguments passed to pd.read_csv()

        Example:
            >>> loader = CSVLoader(data_dir="./data/csv")
            >>> tables = loader.load_tables()
            >>> tables["orders"][0]
            {'id': 1, 'userId': 1, 'total': 9.5}
        """
        super().__init__(data_dir=data_dir, file_pattern=file_pattern, **pandas_kwargs)

        self.data_dir = Path(data_dir)
        self.file_pattern = file_pattern
        self.pandas_kwargs = pandas_kwargs

        if not self.data_dir.exists():
            raise FileNotFoundError(f"Data directory not found: {self.data_dir}")

        if not self.data_dir.is_dir():
            raise NotADirectoryError(f"Not a directory: {self.data_dir}")

    def _csv_files(self) -> List[Path]:
        return sorted(self.data_dir.glob(self.file_pattern))

    def load_tables(self) -> Dict[str, List[Dict[str, Any]]]:
        """Load all CSV files in the directory.

        Returns:
            Dict mapping table_name -> list of records
        """
        csv_files = self._csv_files()

        if not csv_files:
            raise ValueError(
                f"No CSV files found in {self.data_dir} "
                f"matching pattern '{self.file_pattern}'"
            )

        self.logger.info(f"Found {len(csv_files)} CSV files in {self.data_dir}")

        tables = {}
        for csv_file in csv_files:
            table_name = csv_file.stem
            self.logger.debug(f"Loading {csv_file.name} as table '{table_name}'")
            tables[table_name] = self.load_single_table(table_name)

        self.logger.info(f"Successfully loaded {len(tables)} tables")
        return tables

    def get_table_names(self) -> List[str]:
        """Get list of CSV file names (without .csv extension)."""
        return [f.stem for f in self._csv_files()]

    def load_single_table(self, table_name: str) -> List[Dict[str, Any]]:
        """Load a single table by name.

        Args:
            table_name: Table name (CSV filename without extension)

        Returns:
            List of records

        Raises:
            FileNotFoundError: If CSV file doesn't exist
        """
        csv_file = self.data_dir / f"{table_name}.csv"

        if not csv_file.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file}")

        df = pd.read_csv(csv_file, **self.pandas_kwargs)
        self.logger.debug(f"  Loaded {len(df)} rows, {len(df.columns)} columns")

        return dataframe_to_records(df)
