"""Callbacks for search progress and logging."""

from __future__ import annotations

import logging
import time
from abc import ABC

from hybridlimit.core.config import HybridConfig
from hybridlimit.core.types import EvaluationRecord, LimitResult, ParameterPoint, SearchState
from hybridlimit.report import summary_line

logger = logging.getLogger(__name__)

PHASE_MESSAGES = {
    "expand": "Search for upper limit to the limit",
    "bisect": "Now doing proper bracketing & bisection",
    "refine": "Determining interval around the limit",
}


class SearchCallback(ABC):
    """Base class for search callbacks."""

    def on_search_begin(self, config: HybridConfig, point: ParameterPoint) -> None:
        """Called once before the first oracle call."""
        pass

    def on_phase_begin(self, phase: str) -> None:
        """Called when the search enters ``expand``, ``bisect`` or ``refine``."""
        pass

    def on_evaluation(self, record: EvaluationRecord) -> None:
        """Called after every oracle batch at a trial point."""
        pass

    def on_bracket_update(self, state: SearchState) -> None:
        """Called whenever the bisection bracket changes."""
        pass

    def on_search_end(self, result: LimitResult) -> None:
        """Called with the final result, successful or not."""
        pass


class CallbackList:
    """Container for managing multiple callbacks."""

    def __init__(self, callbacks: list[SearchCallback] | None = None):
        self.callbacks = callbacks or []

    def append(self, callback: SearchCallback) -> None:
        """Add a callback to the list."""
        self.callbacks.append(callback)

    def on_search_begin(self, config: HybridConfig, point: ParameterPoint) -> None:
        for cb in self.callbacks:
            cb.on_search_begin(config, point)

    def on_phase_begin(self, phase: str) -> None:
        for cb in self.callbacks:
            cb.on_phase_begin(phase)

    def on_evaluation(self, record: EvaluationRecord) -> None:
        for cb in self.callbacks:
            cb.on_evaluation(record)

    def on_bracket_update(self, state: SearchState) -> None:
        for cb in self.callbacks:
            cb.on_bracket_update(state)

    def on_search_end(self, result: LimitResult) -> None:
        for cb in self.callbacks:
            cb.on_search_end(result)


def format_evaluation(record: EvaluationRecord, parameter: str, statistic_name: str) -> str:
    return f"{parameter} = {record.r:.6g}: {statistic_name} = {record.estimate}"


class LoggingCallback(SearchCallback):
    """
    Callback narrating the search through the ``logging`` module.

    Args:
        level: Log level used for per-point progress lines.

    Example:
        >>> search = HybridLimitSearch(oracle, config, callbacks=[LoggingCallback()])
    """

    def __init__(self, level: int = logging.INFO):
        self.level = level
        self._parameter = "r"
        self._statistic_name = "CLs"
        self._start_time: float = 0.0

    def on_search_begin(self, config: HybridConfig, point: ParameterPoint) -> None:
        self._parameter = point.name
        self._statistic_name = config.statistic_name
        self._start_time = time.time()
        logger.info(
            f"Searching {config.confidence_level * 100:g}% CL upper limit on {point.name} "
            f"in [{point.minimum:g}, {point.maximum:g}] with {config.toys} toys per batch "
            f"({config.test_statistic}, {config.statistic_name})"
        )

    def on_phase_begin(self, phase: str) -> None:
        logger.info(PHASE_MESSAGES.get(phase, phase))

    def on_evaluation(self, record: EvaluationRecord) -> None:
        logger.log(self.level, format_evaluation(record, self._parameter, self._statistic_name))

    def on_bracket_update(self, state: SearchState) -> None:
        logger.debug(
            f"bracket [{state.r_min:.6g}, {state.r_max:.6g}] "
            f"{self._statistic_name} edges {state.cls_min} / {state.cls_max}"
        )

    def on_search_end(self, result: LimitResult) -> None:
        elapsed = time.time() - self._start_time
        if result.ok:
            logger.info(f"{summary_line(result)} ({result.outcome.value}, {elapsed:.1f}s)")
        else:
            logger.error(f"Search failed ({result.outcome.value}): {result.message}")


class TraceCallback(SearchCallback):
    """Collects the human-readable progress trace of a search."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.records: list[EvaluationRecord] = []
        self.states: list[SearchState] = []
        self._parameter = "r"
        self._statistic_name = "CLs"

    def on_search_begin(self, config: HybridConfig, point: ParameterPoint) -> None:
        self.lines.clear()
        self.records.clear()
        self.states.clear()
        self._parameter = point.name
        self._statistic_name = config.statistic_name

    def on_phase_begin(self, phase: str) -> None:
        self.lines.append(PHASE_MESSAGES.get(phase, phase))

    def on_evaluation(self, record: EvaluationRecord) -> None:
        self.records.append(record)
        self.lines.append(format_evaluation(record, self._parameter, self._statistic_name))

    def on_bracket_update(self, state: SearchState) -> None:
        self.states.append(state)

    def on_search_end(self, result: LimitResult) -> None:
        if result.ok:
            self.lines.append(summary_line(result))
        else:
            self.lines.append(f"Search failed: {result.message}")

    def render(self) -> str:
        return "\n".join(self.lines)
