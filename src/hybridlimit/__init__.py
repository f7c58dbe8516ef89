"""
hybridlimit - toy Monte-Carlo upper limits on a signal-strength parameter.

Simple Usage:
    from hybridlimit import HybridConfig, HybridLimitSearch, ToyHybridCalculator
    from hybridlimit.model_loader import load_model

    model = load_model("model.toml")
    search = HybridLimitSearch(ToyHybridCalculator(model, seed=1), HybridConfig(toys=1000))
    result = search.run(model.parameter)
    if result.ok:
        print(result.limit, result.uncertainty)

Any object implementing :class:`ConfidenceOracle` can replace the toy
calculator.
"""

from .core import (
    CancellationToken,
    ConfidenceEstimate,
    ConfidenceOracle,
    ConfigCheck,
    ConfigurationError,
    EvaluationRecord,
    HybridConfig,
    HybridLimitError,
    HypoTestResult,
    LimitResult,
    ModelFormatError,
    OracleFailureError,
    OracleSettings,
    ParameterPoint,
    SearchCancelledError,
    SearchError,
    SearchOutcome,
    SearchState,
    UnboundedSearchError,
    build_oracle_settings,
    check_config,
)
from .hybrid import CountingModel, NuisancePrior, ToyHybridCalculator, ToyResult
from .search import (
    AdaptiveEvaluator,
    CallbackList,
    HybridLimitSearch,
    LoggingCallback,
    SearchCallback,
    TraceCallback,
    bisect,
    compute_limit,
    expand_bracket,
    refine_interval,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Configuration
    "HybridConfig",
    "ConfigCheck",
    "OracleSettings",
    "check_config",
    "build_oracle_settings",
    # Errors
    "HybridLimitError",
    "ConfigurationError",
    "ModelFormatError",
    "SearchError",
    "OracleFailureError",
    "UnboundedSearchError",
    "SearchCancelledError",
    # Types
    "ParameterPoint",
    "ConfidenceEstimate",
    "SearchState",
    "EvaluationRecord",
    "SearchOutcome",
    "LimitResult",
    # Interfaces
    "ConfidenceOracle",
    "HypoTestResult",
    "CancellationToken",
    # Search
    "AdaptiveEvaluator",
    "expand_bracket",
    "bisect",
    "refine_interval",
    "HybridLimitSearch",
    "compute_limit",
    "SearchCallback",
    "CallbackList",
    "LoggingCallback",
    "TraceCallback",
    # Reference oracle
    "CountingModel",
    "NuisancePrior",
    "ToyResult",
    "ToyHybridCalculator",
]
