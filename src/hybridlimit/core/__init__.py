"""Core types, configuration and interfaces for hybridlimit."""

from .config import (
    TEST_STATISTICS,
    ConfigCheck,
    HybridConfig,
    OracleSettings,
    build_oracle_settings,
    check_config,
)
from .exceptions import (
    ConfigurationError,
    HybridLimitError,
    ModelFormatError,
    OracleFailureError,
    SearchCancelledError,
    SearchError,
    UnboundedSearchError,
)
from .interfaces import CancellationToken, ConfidenceOracle, HypoTestResult
from .types import (
    ConfidenceEstimate,
    EvaluationRecord,
    LimitResult,
    ParameterPoint,
    SearchOutcome,
    SearchState,
)

__all__ = [
    "TEST_STATISTICS",
    "HybridConfig",
    "ConfigCheck",
    "OracleSettings",
    "check_config",
    "build_oracle_settings",
    "HybridLimitError",
    "ConfigurationError",
    "ModelFormatError",
    "SearchError",
    "OracleFailureError",
    "UnboundedSearchError",
    "SearchCancelledError",
    "ConfidenceOracle",
    "HypoTestResult",
    "CancellationToken",
    "ParameterPoint",
    "ConfidenceEstimate",
    "SearchState",
    "EvaluationRecord",
    "SearchOutcome",
    "LimitResult",
]
