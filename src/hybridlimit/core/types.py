"""Typed value objects shared by the search and its observers."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from .exceptions import ConfigurationError

FAILED_ERROR = -1.0


@dataclass(frozen=True)
class ParameterPoint:
    """A value of the parameter under test together with its allowed range."""

    value: float
    minimum: float = 0.0
    maximum: float = 20.0
    name: str = "r"

    def __post_init__(self) -> None:
        if self.minimum > self.maximum:
            raise ConfigurationError(
                f"minimum must not exceed maximum, got [{self.minimum}, {self.maximum}]",
                config_name=self.name,
            )

    def with_value(self, value: float) -> ParameterPoint:
        return replace(self, value=float(value))

    def with_maximum(self, maximum: float) -> ParameterPoint:
        return replace(self, maximum=float(maximum))

    def apply_hint(self, hint: float | None) -> ParameterPoint:
        """Narrow the upper bound to ``3 * hint`` for a positive hint above the minimum."""
        if hint is None or hint <= max(self.minimum, 0.0):
            return self
        return self.with_maximum(min(3.0 * hint, self.maximum))


@dataclass(frozen=True)
class ConfidenceEstimate:
    """Estimate of the exclusion statistic with its standard error.

    An ``error`` of ``-1`` marks an evaluation the oracle could not complete.
    """

    value: float
    error: float

    @classmethod
    def failed(cls) -> ConfidenceEstimate:
        return cls(value=FAILED_ERROR, error=FAILED_ERROR)

    @property
    def is_failed(self) -> bool:
        return self.error == FAILED_ERROR

    def compatible_with(self, target: float, n_sigma: float = 3.0) -> bool:
        """True while ``target`` lies within ``n_sigma`` errors of the value."""
        return abs(self.value - target) < n_sigma * self.error

    def below(self, threshold: float, n_sigma: float = 3.0) -> bool:
        """True when the value is below ``threshold`` even after ``n_sigma`` errors."""
        return self.value + n_sigma * abs(self.error) < threshold

    def __str__(self) -> str:
        if self.is_failed:
            return "failed"
        return f"{self.value:.6g} +/- {self.error:.6g}"


@dataclass(frozen=True)
class SearchState:
    """Bisection bracket and the last estimate seen at each of its edges."""

    r_min: float
    r_max: float
    cls_min: ConfidenceEstimate
    cls_max: ConfidenceEstimate

    def __post_init__(self) -> None:
        if self.r_min > self.r_max:
            raise ValueError(
                f"bracket must satisfy r_min <= r_max, got [{self.r_min}, {self.r_max}]"
            )

    @property
    def width(self) -> float:
        return self.r_max - self.r_min

    @property
    def midpoint(self) -> float:
        return 0.5 * (self.r_min + self.r_max)


@dataclass(frozen=True)
class EvaluationRecord:
    """Estimate at a trial point after ``batches`` merged oracle batches."""

    r: float
    estimate: ConfidenceEstimate
    batches: int
    phase: str


class SearchOutcome(str, Enum):
    """How a limit search ended."""

    DIRECT_HIT = "direct_hit"
    CONVERGED = "converged"
    ORACLE_FAILURE = "oracle_failure"
    UNBOUNDED = "unbounded"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class LimitResult:
    """Outcome of one limit search.

    Failed searches keep ``limit`` and ``uncertainty`` unset and describe the
    last attempted point in ``last_r`` / ``last_value``.
    """

    outcome: SearchOutcome
    confidence_level: float
    statistic_name: str
    parameter: str = "r"
    limit: float | None = None
    uncertainty: float | None = None
    interval: tuple[float, float] | None = None
    state: SearchState | None = None
    last_r: float | None = None
    last_value: float | None = None
    message: str = ""
    trace: tuple[EvaluationRecord, ...] = field(default_factory=tuple, repr=False)

    @property
    def ok(self) -> bool:
        return self.outcome in (SearchOutcome.DIRECT_HIT, SearchOutcome.CONVERGED)

    @property
    def toy_batches(self) -> int:
        """Number of oracle batches requested during the search."""
        return len(self.trace)
