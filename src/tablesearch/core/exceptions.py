"""Exceptions raised by the search engine and its collaborators."""

from tablesearch.utils.exceptions import TableSearchError


class ConfigurationError(TableSearchError):
    """Raised when a table configuration or the settings are invalid.

    Configuration problems are detected when the config object is
    constructed, so they surface at startup before any search runs.

    Attributes:
        table: The table whose configuration is invalid, if known
        field: The offending field or attribute name, if known
    """

    def __init__(
        self,
        message: str,
        table: str | None = None,
        field: str | None = None,
    ):
        super().__init__(message)
        self.table = table
        self.field = field

    def __str__(self) -> str:
        location = ".".join(part for part in (self.table, self.field) if part)
        if location:
            return f"ConfigurationError({location}): {self.args[0]}"
        return f"ConfigurationError: {self.args[0]}"


class DataSourceError(TableSearchError):
    """Raised when the underlying data source fails.

    The originating exception is attached as ``__cause__`` and is never
    retried or swallowed by the engine.

    Attributes:
        table: The table being read when the failure happened
        operation: The data source operation ("fetch_page", "fetch_all", "lookup")
    """

    def __init__(self, message: str, table: str, operation: str):
        super().__init__(message)
        self.table = table
        self.operation = operation

    def __str__(self) -> str:
        return f"DataSourceError({self.operation} {self.table}): {self.args[0]}"


class InvalidSearchRequestError(TableSearchError):
    """Raised when search arguments cannot be interpreted.

    Attributes:
        parameter: Name of the offending argument
        value: The rejected value
    """

    def __init__(self, parameter: str, value: object):
        super().__init__(f"Invalid value for {parameter}: {value!r}")
        self.parameter = parameter
        self.value = value

    def __str__(self) -> str:
        return f"InvalidSearchRequestError: {self.args[0]}"
