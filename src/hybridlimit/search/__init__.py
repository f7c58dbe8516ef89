"""Noise-aware upper-limit search."""

from .callbacks import CallbackList, LoggingCallback, SearchCallback, TraceCallback
from .controller import Bisection, HybridLimitSearch, bisect, compute_limit, expand_bracket
from .evaluator import AdaptiveEvaluator
from .refiner import refine_interval

__all__ = [
    "SearchCallback",
    "CallbackList",
    "LoggingCallback",
    "TraceCallback",
    "AdaptiveEvaluator",
    "Bisection",
    "expand_bracket",
    "bisect",
    "refine_interval",
    "HybridLimitSearch",
    "compute_limit",
]
