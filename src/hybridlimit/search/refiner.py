"""Interval refinement around a limit found by a direct hit."""

from __future__ import annotations

import logging

from hybridlimit.core.config import HybridConfig
from hybridlimit.core.exceptions import OracleFailureError
from hybridlimit.core.types import ConfidenceEstimate, SearchState

from .callbacks import CallbackList
from .evaluator import AdaptiveEvaluator

logger = logging.getLogger(__name__)


def _walk_edge(
    evaluator: AdaptiveEvaluator,
    config: HybridConfig,
    *,
    edge: float,
    estimate: ConfidenceEstimate,
    limit: float,
    bound: float,
    phase: str,
) -> tuple[float, ConfidenceEstimate]:
    """Halve the distance between ``edge`` and ``limit`` until ``bound`` or the target is met."""
    target = config.cls_target
    moving_up = edge < limit

    def outside(r: float) -> bool:
        return r < bound if moving_up else r > bound

    while outside(edge) and abs(estimate.value - target) >= config.cls_accuracy:
        trial = 0.5 * (edge + limit)
        estimate = evaluator.evaluate(trial, adaptive=True, target=target, phase=phase)
        if estimate.is_failed:
            raise OracleFailureError(f"Hypotest failed at r = {trial:.6g}", r=trial)
        edge = trial
    return edge, estimate


def refine_interval(
    evaluator: AdaptiveEvaluator,
    config: HybridConfig,
    state: SearchState,
    limit: float,
    callbacks: CallbackList | None = None,
) -> SearchState:
    """
    Pull both bracket edges towards ``limit`` to tighten the reported interval.

    Each edge stops once its own estimate is within ``cls_accuracy`` of the
    target or it has passed ``limit -/+ 0.5 * r_tolerance(limit)``. Edges only
    ever move inwards, so the result stays inside ``state`` and never crosses
    ``limit``.

    Raises:
        OracleFailureError: If any evaluation fails.
    """
    if not state.r_min <= limit <= state.r_max:
        raise ValueError(f"limit {limit} outside bracket [{state.r_min}, {state.r_max}]")
    callbacks = callbacks or CallbackList()
    half_width = 0.5 * config.r_tolerance(limit)

    r_low, cls_low = _walk_edge(
        evaluator,
        config,
        edge=state.r_min,
        estimate=state.cls_min,
        limit=limit,
        bound=limit - half_width,
        phase="refine_low",
    )
    state = SearchState(r_min=r_low, r_max=state.r_max, cls_min=cls_low, cls_max=state.cls_max)
    callbacks.on_bracket_update(state)

    r_high, cls_high = _walk_edge(
        evaluator,
        config,
        edge=state.r_max,
        estimate=state.cls_max,
        limit=limit,
        bound=limit + half_width,
        phase="refine_high",
    )
    state = SearchState(r_min=r_low, r_max=r_high, cls_min=cls_low, cls_max=cls_high)
    callbacks.on_bracket_update(state)

    logger.debug(f"refined interval [{r_low:.6g}, {r_high:.6g}] around {limit:.6g}")
    return state
