"""Enumerations used by table search configurations."""

from enum import Enum


class FieldType(str, Enum):
    """How a search term is interpreted against a field."""

    TEXT = "text"  # substring match
    EXACT = "exact"  # equality on the raw term
    NUMBER = "number"  # equality on numeric terms
    DATE = "date"  # day or month range
    STATUS = "status"  # closed set of canonical values
    BOOLEAN = "boolean"  # true/false/yes/no/1/0
    FOREIGN_KEY = "foreign_key"  # search lives in another table
    JSON = "json"  # declared, no search behavior yet
    ARRAY = "array"  # declared, no search behavior yet


class JoinKind(str, Enum):
    """Join kinds available for declared joins."""

    LEFT = "LEFT"
    INNER = "INNER"
    RIGHT = "RIGHT"


class SortPath(str, Enum):
    """Execution path chosen for a sort field."""

    DIRECT = "direct"  # sort and range pushed to the data source
    MATERIALIZE = "materialize"  # fetch all, enrich, sort in memory


class SortDirection(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"
