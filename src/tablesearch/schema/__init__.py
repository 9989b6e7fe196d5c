"""Declarative table search configuration."""

from tablesearch.schema.presets import (
    DIVISIONS_CONFIG,
    PRESET_CONFIGS,
    PROJECTS_CONFIG,
    USERS_CONFIG,
)
from tablesearch.schema.table import (
    AggregateDefinition,
    FieldDefinition,
    JoinDefinition,
    TableConfig,
)
from tablesearch.schema.types import FieldType, JoinKind, SortDirection, SortPath

__all__ = [
    # Types
    "FieldType",
    "JoinKind",
    "SortDirection",
    "SortPath",
    # Definitions
    "AggregateDefinition",
    "FieldDefinition",
    "JoinDefinition",
    "TableConfig",
    # Presets
    "DIVISIONS_CONFIG",
    "PRESET_CONFIGS",
    "PROJECTS_CONFIG",
    "USERS_CONFIG",
]
