"""Upper-limit search: bracket expansion, noisy bisection and optional refinement."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from hybridlimit.core.config import HybridConfig, build_oracle_settings
from hybridlimit.core.exceptions import (
    ConfigurationError,
    OracleFailureError,
    SearchCancelledError,
    SearchError,
    UnboundedSearchError,
)
from hybridlimit.core.interfaces import CancellationToken, ConfidenceOracle
from hybridlimit.core.types import (
    ConfidenceEstimate,
    LimitResult,
    ParameterPoint,
    SearchOutcome,
    SearchState,
)

from .callbacks import CallbackList, SearchCallback
from .evaluator import N_SIGMA, AdaptiveEvaluator
from .refiner import refine_interval

logger = logging.getLogger(__name__)

NOT_EXCLUDED = ConfidenceEstimate(value=1.0, error=0.0)


@dataclass(frozen=True)
class Bisection:
    """Final bracket of a bisection and the point it settled on."""

    state: SearchState
    limit: float
    direct_hit: bool

    @property
    def uncertainty(self) -> float:
        return 0.5 * self.state.width


def expand_bracket(
    evaluator: AdaptiveEvaluator,
    config: HybridConfig,
    point: ParameterPoint,
) -> tuple[ParameterPoint, ConfidenceEstimate]:
    """
    Double the upper bound until the statistic there is clearly below target.

    Expansion stops when the estimate is exactly zero or when it stays below
    ``cls_target`` after adding three standard errors. The statistic is
    assumed to be non-increasing in the parameter.

    Returns:
        The point with its new maximum and the estimate observed there.

    Raises:
        OracleFailureError: If an evaluation fails.
        UnboundedSearchError: If the trial value reaches ``max_expansion_ratio``
            times the initial maximum without crossing the threshold.
    """
    initial = point.maximum
    if initial <= 0:
        raise ConfigurationError(
            f"upper bound must be positive to expand, got {initial}", config_name=point.name
        )
    trial = initial
    while True:
        estimate = evaluator.evaluate(trial, phase="expand")
        if estimate.is_failed:
            raise OracleFailureError(f"Hypotest failed at {point.name} = {trial:.6g}", r=trial)
        if estimate.value == 0 or estimate.below(config.cls_target, N_SIGMA):
            break
        if trial / initial >= config.max_expansion_ratio:
            raise UnboundedSearchError(
                f"Cannot set higher limit: at {point.name} = {trial:.6g} still get "
                f"{config.statistic_name} = {estimate.value:.6g}",
                r=trial,
                value=estimate.value,
            )
        trial *= 2.0
    return point.with_maximum(trial), estimate


def bisect(
    evaluator: AdaptiveEvaluator,
    config: HybridConfig,
    state: SearchState,
    callbacks: CallbackList | None = None,
) -> Bisection:
    """
    Bisect ``state`` until the bracket is narrower than the ``r`` tolerance.

    Each midpoint is evaluated adaptively against ``cls_target``. A midpoint
    within ``cls_accuracy`` of the target ends the search as a direct hit.
    Otherwise the midpoint replaces whichever edge lies on the same side of
    the target as the upper edge estimate.

    Raises:
        OracleFailureError: If an evaluation fails.
    """
    callbacks = callbacks or CallbackList()
    target = config.cls_target
    while True:
        r_mid = state.midpoint
        mid = evaluator.evaluate(r_mid, adaptive=True, target=target, phase="bisect")
        if mid.is_failed:
            raise OracleFailureError(f"Hypotest failed at r = {r_mid:.6g}", r=r_mid)
        if abs(mid.value - target) <= config.cls_accuracy:
            logger.info("reached accuracy.")
            return Bisection(state=state, limit=r_mid, direct_hit=True)
        if (mid.value > target) == (state.cls_max.value > target):
            state = replace(state, r_max=r_mid, cls_max=mid)
        else:
            state = replace(state, r_min=r_mid, cls_min=mid)
        callbacks.on_bracket_update(state)
        if state.width <= config.r_tolerance(r_mid):
            return Bisection(state=state, limit=state.midpoint, direct_hit=False)


class HybridLimitSearch:
    """
    Drive a full upper-limit search against a confidence oracle.

    Args:
        oracle: Oracle producing toy-based exclusion statistics.
        config: Search configuration. Defaults to :class:`HybridConfig`.
        callbacks: Observers notified of progress and the final result.
        cancel: Optional token checked before every oracle batch.
        max_batches: Optional cap on adaptive batches per trial point.

    Example:
        >>> search = HybridLimitSearch(oracle, HybridConfig(r_interval=True))
        >>> result = search.run(ParameterPoint(value=1.0, maximum=5.0))
        >>> result.limit, result.uncertainty
    """

    def __init__(
        self,
        oracle: ConfidenceOracle,
        config: HybridConfig | None = None,
        callbacks: list[SearchCallback] | None = None,
        cancel: CancellationToken | None = None,
        max_batches: int | None = None,
    ):
        self.oracle = oracle
        self.config = config or HybridConfig()
        self.callbacks = CallbackList(list(callbacks or []))
        self.cancel = cancel
        self.max_batches = max_batches

    def run(self, point: ParameterPoint, hint: float | None = None) -> LimitResult:
        """Search for the upper limit on ``point``'s parameter.

        Search failures come back as a :class:`LimitResult` whose ``ok`` is
        false; no oracle call is made after the first failure.

        Raises:
            ConfigurationError: Before any oracle call, if the configuration
                cannot be satisfied by the oracle or the parameter range.
        """
        settings = build_oracle_settings(self.config, self.oracle)
        point = point.apply_hint(hint)
        if point.maximum <= 0:
            raise ConfigurationError(
                f"upper bound must be positive, got {point.maximum}", config_name=point.name
            )
        self.oracle.configure(settings)

        evaluator = AdaptiveEvaluator(
            self.oracle,
            self.config,
            callbacks=self.callbacks,
            cancel=self.cancel,
            max_batches=self.max_batches,
        )
        self.callbacks.on_search_begin(self.config, point)
        try:
            result = self._search(evaluator, point)
        except UnboundedSearchError as exc:
            result = self._failure(SearchOutcome.UNBOUNDED, exc, evaluator, point)
        except OracleFailureError as exc:
            result = self._failure(SearchOutcome.ORACLE_FAILURE, exc, evaluator, point)
        except SearchCancelledError as exc:
            result = self._failure(SearchOutcome.CANCELLED, exc, evaluator, point)
        self.callbacks.on_search_end(result)
        return result

    def _search(self, evaluator: AdaptiveEvaluator, point: ParameterPoint) -> LimitResult:
        config = self.config
        self.callbacks.on_phase_begin("expand")
        point, cls_max = expand_bracket(evaluator, config, point)

        self.callbacks.on_phase_begin("bisect")
        state = SearchState(
            r_min=0.0, r_max=point.maximum, cls_min=NOT_EXCLUDED, cls_max=cls_max
        )
        self.callbacks.on_bracket_update(state)
        bisection = bisect(evaluator, config, state, self.callbacks)

        state = bisection.state
        if bisection.direct_hit and config.r_interval:
            logger.info(
                f"Limit before determining interval: {point.name} < {bisection.limit:.6g} "
                f"+/- {bisection.uncertainty:.6g}"
            )
            self.callbacks.on_phase_begin("refine")
            state = refine_interval(evaluator, config, state, bisection.limit, self.callbacks)

        return LimitResult(
            outcome=SearchOutcome.DIRECT_HIT if bisection.direct_hit else SearchOutcome.CONVERGED,
            confidence_level=config.confidence_level,
            statistic_name=config.statistic_name,
            parameter=point.name,
            limit=bisection.limit,
            uncertainty=0.5 * state.width,
            interval=(state.r_min, state.r_max) if config.r_interval else None,
            state=state,
            last_r=evaluator.trace[-1].r,
            last_value=evaluator.trace[-1].estimate.value,
            trace=tuple(evaluator.trace),
        )

    def _failure(
        self,
        outcome: SearchOutcome,
        exc: SearchError,
        evaluator: AdaptiveEvaluator,
        point: ParameterPoint,
    ) -> LimitResult:
        return LimitResult(
            outcome=outcome,
            confidence_level=self.config.confidence_level,
            statistic_name=self.config.statistic_name,
            parameter=point.name,
            last_r=exc.r,
            last_value=exc.value,
            message=str(exc),
            trace=tuple(evaluator.trace),
        )


def compute_limit(
    oracle: ConfidenceOracle,
    point: ParameterPoint,
    config: HybridConfig | None = None,
    *,
    hint: float | None = None,
    callbacks: list[SearchCallback] | None = None,
    **options: Any,
) -> LimitResult:
    """Run one search, building the config from ``options`` when none is given."""
    if config is None:
        config = HybridConfig(**options)
    elif options:
        config = config.with_updates(**options)
    return HybridLimitSearch(oracle, config, callbacks=callbacks).run(point, hint=hint)
