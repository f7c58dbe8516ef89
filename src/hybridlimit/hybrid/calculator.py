"""Toy Monte-Carlo hybrid calculator implementing the confidence-oracle protocol."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from hybridlimit.core.config import OracleSettings
from hybridlimit.core.exceptions import ConfigurationError

from .model import CountingModel
from .statistics import STATISTICS

logger = logging.getLogger(__name__)

_EMPTY = np.empty(0, dtype=np.float64)


@dataclass(frozen=True)
class ToyResult:
    """
    Toy distributions of the test statistic at one value of ``r``.

    ``sb_samples`` and ``b_samples`` hold the statistic for toys thrown under
    the signal-plus-background and background-only hypotheses. Probabilities
    count toys at least as background-like as the observation.
    """

    r: float
    observed: float
    sb_samples: np.ndarray
    b_samples: np.ndarray
    reason: str = ""

    @classmethod
    def failure(cls, r: float, reason: str) -> ToyResult:
        return cls(r=r, observed=math.nan, sb_samples=_EMPTY, b_samples=_EMPTY, reason=reason)

    @property
    def ok(self) -> bool:
        return not self.reason and self.sb_samples.size > 0 and self.b_samples.size > 0

    @property
    def n_toys(self) -> int:
        return int(self.sb_samples.size)

    @property
    def clsplusb(self) -> float:
        return float(np.mean(self.sb_samples >= self.observed))

    @property
    def clsplusb_error(self) -> float:
        return _binomial_error(self.clsplusb, self.sb_samples.size)

    @property
    def clb(self) -> float:
        return float(np.mean(self.b_samples >= self.observed))

    @property
    def clb_error(self) -> float:
        return _binomial_error(self.clb, self.b_samples.size)

    @property
    def cls(self) -> float:
        clb = self.clb
        if clb == 0:
            return 1.0
        return self.clsplusb / clb

    @property
    def cls_error(self) -> float:
        clb = self.clb
        if clb == 0:
            return 0.0
        # d(CLs) = dCLsb / CLb  (+)  CLsb * dCLb / CLb^2
        term_sb = self.clsplusb_error / clb
        term_b = self.clsplusb * self.clb_error / clb**2
        return math.hypot(term_sb, term_b)

    def merge(self, other: ToyResult) -> ToyResult:
        """Combine the toys of two batches thrown at the same ``r``."""
        if not self.ok:
            return self
        if not other.ok:
            return other
        if not math.isclose(self.r, other.r) or not math.isclose(self.observed, other.observed):
            raise ValueError(
                f"cannot merge toys at r = {self.r} and r = {other.r} "
                f"(observed {self.observed} vs {other.observed})"
            )
        return ToyResult(
            r=self.r,
            observed=self.observed,
            sb_samples=np.concatenate([self.sb_samples, other.sb_samples]),
            b_samples=np.concatenate([self.b_samples, other.b_samples]),
        )


def _binomial_error(p: float, n: int) -> float:
    if n <= 0:
        return 0.0
    return math.sqrt(p * (1.0 - p) / n)


class ToyHybridCalculator:
    """
    Frequentist-Bayesian hybrid calculator for a :class:`CountingModel`.

    Toys are Poisson fluctuations of the expected yields; with nuisance
    randomization enabled each toy first draws a background scale from the
    model's prior.

    Args:
        model: Counting model providing yields and observed counts.
        seed: Seed of the calculator's random stream.

    Example:
        >>> oracle = ToyHybridCalculator(model, seed=7)
        >>> result = HybridLimitSearch(oracle, HybridConfig()).run(model.parameter)
    """

    def __init__(self, model: CountingModel, seed: int | None = 0):
        self.model = model
        self.rng = np.random.default_rng(seed)
        self.settings: OracleSettings | None = None

    def has_nuisance(self) -> bool:
        return self.model.nuisance is not None

    def is_extended(self) -> bool:
        return self.model.extended

    def configure(self, settings: OracleSettings) -> None:
        if settings.use_nuisance and not self.has_nuisance():
            raise ConfigurationError(
                "nuisance randomization requested but the model has no nuisance prior",
                config_name=self.model.name,
            )
        if settings.test_statistic not in STATISTICS:
            raise ConfigurationError(f"unknown test statistic '{settings.test_statistic}'")
        self.settings = settings

    def run_test(self, r: float) -> ToyResult:
        settings = self.settings
        if settings is None:
            raise ConfigurationError("configure() must be called before run_test()")
        if not math.isfinite(r) or r < 0:
            return ToyResult.failure(r, f"signal strength must be finite and >= 0, got {r}")

        statistic = STATISTICS[settings.test_statistic]
        with np.errstate(divide="ignore", invalid="ignore"):
            observed = float(statistic(self.model.observed[None, :], self.model, r)[0])
            sb = statistic(self._throw(r, settings), self.model, r)
            b = statistic(self._throw(0.0, settings), self.model, r)

        finite = math.isfinite(observed) and np.all(np.isfinite(sb)) and np.all(np.isfinite(b))
        if not finite:
            logger.warning(f"non-finite test statistic at r = {r:.6g}")
            return ToyResult.failure(r, "non-finite test statistic")
        return ToyResult(r=r, observed=observed, sb_samples=sb, b_samples=b)

    def accumulate(self, existing: ToyResult, more: ToyResult) -> ToyResult:
        return existing.merge(more)

    def _throw(self, r: float, settings: OracleSettings) -> np.ndarray:
        toys = settings.toys
        if settings.use_nuisance and self.model.nuisance is not None:
            theta = self.model.nuisance.sample(self.rng, toys)
        else:
            theta = np.ones(toys)
        return self.rng.poisson(self.model.expected(r, theta)).astype(np.float64)
