"""Collaborator interfaces consumed by the limit search."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .config import OracleSettings


@runtime_checkable
class HypoTestResult(Protocol):
    """One (possibly accumulated) batch of toy replicas at a fixed parameter value.

    ``ok`` is false for the explicit failed variant; the statistic accessors
    are meaningless in that case.
    """

    @property
    def ok(self) -> bool: ...

    @property
    def cls(self) -> float: ...

    @property
    def cls_error(self) -> float: ...

    @property
    def clb(self) -> float: ...

    @property
    def clb_error(self) -> float: ...

    @property
    def clsplusb(self) -> float: ...

    @property
    def clsplusb_error(self) -> float: ...


@runtime_checkable
class ConfidenceOracle(Protocol):
    """Simulation engine producing exclusion statistics at a parameter value.

    The oracle owns its random-number stream; repeated calls within one
    evaluation advance it.
    """

    def configure(self, settings: OracleSettings) -> None:
        """Receive per-search settings before the first ``run_test`` call."""
        ...

    def run_test(self, r: float) -> HypoTestResult:
        """Run one batch of toys at ``r``."""
        ...

    def accumulate(self, existing: HypoTestResult, more: HypoTestResult) -> HypoTestResult:
        """Merge the toys of ``more`` into ``existing`` and return the combined result."""
        ...

    def has_nuisance(self) -> bool:
        """Whether nuisance parameters and their prior are available."""
        ...

    def is_extended(self) -> bool:
        """Whether the underlying counting model is extended."""
        ...


class CancellationToken:
    """Thread-safe stop flag with an optional wall-clock deadline.

    Example:
        >>> token = CancellationToken(timeout_seconds=3600)
        >>> search = HybridLimitSearch(oracle, config, cancel=token)
    """

    def __init__(self, timeout_seconds: float | None = None):
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        self._event = threading.Event()
        self._deadline = (
            time.monotonic() + timeout_seconds if timeout_seconds is not None else None
        )

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline
