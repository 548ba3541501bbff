"""storelens - Schema inference and relationship discovery for key/value record stores."""

__version__ = "0.1.0"

# Connectors
from storelens.connectors import (
    BaseConnector,
    ConnectorFactory,
    CSVLoader,
    JSONLoader,
    load_into_store,
)

# Core modules
from storelens.core import (
    AnalysisFacade,
    AnalysisReport,
    DataType,
    InMemoryRecordStore,
    RecordStore,
    RelationshipMapper,
    SchemaManager,
    infer_type,
)

# Errors
from storelens.exceptions import (
    InvalidSchemaDefinitionError,
    StoreCapacityError,
    StorelensError,
)

# Utils
from storelens.utils.config import Config, get_config, load_config

__all__ = [
    # Version
    "__version__",
    # Core
    "AnalysisFacade",
    "AnalysisReport",
    "DataType",
    "InMemoryRecordStore",
    "RecordStore",
    "RelationshipMapper",
    "SchemaManager",
    "infer_type",
    # Connectors
    "BaseConnector",
    "ConnectorFactory",
    "CSVLoader",
    "JSONLoader",
    "load_into_store",
    # Errors
    "InvalidSchemaDefinitionError",
    "StoreCapacityError",
    "StorelensError",
    # Config
    "Config",
    "get_config",
    "load_config",
]
