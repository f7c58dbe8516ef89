"""Reference toy Monte-Carlo oracle for counting experiments."""

from .calculator import ToyHybridCalculator, ToyResult
from .model import CountingModel, NuisancePrior
from .statistics import STATISTICS, lep_statistic, tev_statistic

__all__ = [
    "CountingModel",
    "NuisancePrior",
    "ToyResult",
    "ToyHybridCalculator",
    "STATISTICS",
    "lep_statistic",
    "tev_statistic",
]
