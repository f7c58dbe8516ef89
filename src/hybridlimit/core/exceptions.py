"""Custom exceptions for hybridlimit."""

from __future__ import annotations


class HybridLimitError(Exception):
    """Base exception for all hybridlimit errors."""

    pass


class ConfigurationError(HybridLimitError):
    """Raised when search or oracle configuration is invalid."""

    def __init__(self, message: str, config_name: str | None = None):
        self.config_name = config_name
        if config_name:
            message = f"[{config_name}] {message}"
        super().__init__(message)


class ModelFormatError(HybridLimitError):
    """Raised when a counting model file cannot be parsed."""

    pass


class SearchError(HybridLimitError):
    """Base class for failures that end a limit search."""

    def __init__(self, message: str, r: float | None = None, value: float | None = None):
        self.r = r
        self.value = value
        super().__init__(message)


class OracleFailureError(SearchError):
    """Raised when the oracle could not produce a result at a trial point."""

    pass


class UnboundedSearchError(SearchError):
    """Raised when bracket expansion never crosses the threshold."""

    pass


class SearchCancelledError(SearchError):
    """Raised when a cancellation token fires before a replica batch."""

    pass
