"""Domain-specific exceptions for Closing Core.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from ClosingReportError for easy catching.
"""


class ClosingReportError(Exception):
    """Base exception for all Closing Core errors.

    Users can catch this exception to handle any error raised by the
    closing report engine.
    """

    pass


class ConfigError(ClosingReportError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid configuration values are provided (e.g. empty support rates)
    - A configuration file cannot be loaded or parsed
    """

    pass


class DataQualityError(ClosingReportError):
    """Raised when input data cannot be processed at all.

    Malformed-but-well-typed rows never raise; they are skipped and counted.
    """

    pass


class InputContractError(DataQualityError):
    """Raised when a source table violates the tabular input contract.

    This exception is raised when:
    - A table is not a list of rows
    - A row is not a sequence of cells (e.g. a bare string or a mapping)
    """

    pass
