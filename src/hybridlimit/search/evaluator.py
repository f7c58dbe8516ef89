"""Adaptive evaluation of the exclusion statistic at a single trial point."""

from __future__ import annotations

import logging

from hybridlimit.core.config import HybridConfig
from hybridlimit.core.exceptions import SearchCancelledError
from hybridlimit.core.interfaces import CancellationToken, ConfidenceOracle, HypoTestResult
from hybridlimit.core.types import ConfidenceEstimate, EvaluationRecord

from .callbacks import CallbackList

logger = logging.getLogger(__name__)

N_SIGMA = 3.0


class AdaptiveEvaluator:
    """
    Wraps an oracle and adds toy batches until a decision is statistically safe.

    Args:
        oracle: Oracle producing toy batches, already configured for the search.
        config: Search configuration (statistic choice and ``cls_accuracy``).
        callbacks: Receives one :class:`EvaluationRecord` per oracle batch.
        cancel: Checked before every batch request.
        max_batches: Optional cap on batches per trial point.
    """

    def __init__(
        self,
        oracle: ConfidenceOracle,
        config: HybridConfig,
        callbacks: CallbackList | None = None,
        cancel: CancellationToken | None = None,
        max_batches: int | None = None,
    ):
        if max_batches is not None and max_batches < 1:
            raise ValueError(f"max_batches must be >= 1, got {max_batches}")
        self.oracle = oracle
        self.config = config
        self.callbacks = callbacks or CallbackList()
        self.cancel = cancel
        self.max_batches = max_batches
        self.trace: list[EvaluationRecord] = []

    @property
    def batches_requested(self) -> int:
        return len(self.trace)

    def evaluate(
        self,
        r: float,
        *,
        adaptive: bool = False,
        target: float | None = None,
        phase: str = "bisect",
    ) -> ConfidenceEstimate:
        """Estimate the statistic at ``r``.

        With ``adaptive`` set, more batches are merged in while ``target`` lies
        within three standard errors of the estimate and the error is still at
        least ``cls_accuracy``. Returns the failed sentinel as soon as any batch
        fails.
        """
        if adaptive and target is None:
            raise ValueError("adaptive evaluation requires a target")

        result = self._request(r)
        batches = 1
        if not result.ok:
            return self._failed(r, batches, phase)
        estimate = self._extract(result)
        self._record(r, estimate, batches, phase)

        if adaptive and target is not None:
            while (
                estimate.compatible_with(target, N_SIGMA)
                and estimate.error >= self.config.cls_accuracy
            ):
                if self.max_batches is not None and batches >= self.max_batches:
                    logger.warning(
                        f"{self.config.statistic_name} at r = {r:.6g} still compatible with "
                        f"{target:.6g} after {batches} batches"
                    )
                    break
                more = self._request(r)
                batches += 1
                if not more.ok:
                    return self._failed(r, batches, phase)
                result = self.oracle.accumulate(result, more)
                estimate = self._extract(result)
                self._record(r, estimate, batches, phase)

        logger.debug(
            f"r = {r:.6g}: CLs = {result.cls:.6g} +/- {result.cls_error:.6g}, "
            f"CLb = {result.clb:.6g} +/- {result.clb_error:.6g}, "
            f"CLsplusb = {result.clsplusb:.6g} +/- {result.clsplusb_error:.6g}"
        )
        return estimate

    def _request(self, r: float) -> HypoTestResult:
        if self.cancel is not None and self.cancel.cancelled:
            raise SearchCancelledError(f"search cancelled before evaluating r = {r:.6g}", r=r)
        return self.oracle.run_test(r)

    def _extract(self, result: HypoTestResult) -> ConfidenceEstimate:
        if self.config.use_cls:
            return ConfidenceEstimate(float(result.cls), float(result.cls_error))
        return ConfidenceEstimate(float(result.clsplusb), float(result.clsplusb_error))

    def _record(self, r: float, estimate: ConfidenceEstimate, batches: int, phase: str) -> None:
        record = EvaluationRecord(r=r, estimate=estimate, batches=batches, phase=phase)
        self.trace.append(record)
        self.callbacks.on_evaluation(record)

    def _failed(self, r: float, batches: int, phase: str) -> ConfidenceEstimate:
        logger.error(f"Hypotest failed at r = {r:.6g}")
        estimate = ConfidenceEstimate.failed()
        self._record(r, estimate, batches, phase)
        return estimate
