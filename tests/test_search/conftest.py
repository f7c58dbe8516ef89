"""Deterministic fake oracles shared by the search tests."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

import pytest

from hybridlimit.core.config import OracleSettings


@dataclass(frozen=True)
class FakeResult:
    r: float
    value: float
    error: float
    batches: int = 1
    ok: bool = True

    @property
    def cls(self) -> float:
        return self.value

    @property
    def cls_error(self) -> float:
        return self.error

    @property
    def clsplusb(self) -> float:
        return self.value

    @property
    def clsplusb_error(self) -> float:
        return self.error

    @property
    def clb(self) -> float:
        return 1.0

    @property
    def clb_error(self) -> float:
        return 0.0


class FunctionOracle:
    """Oracle returning ``value_fn(r)`` with an error depending on merged batches.

    ``fail_on_call`` makes the N-th ``run_test`` call (1-based) fail.
    ``on_call`` is invoked with the call count after every ``run_test``.
    """

    def __init__(
        self,
        value_fn: Callable[[float], float],
        error_fn: Callable[[float, int], float] | None = None,
        *,
        fail_on_call: int | None = None,
        nuisance: bool = False,
        on_call: Callable[[int], None] | None = None,
    ):
        self.value_fn = value_fn
        self.error_fn = error_fn or (lambda r, batches: 0.0)
        self.fail_on_call = fail_on_call
        self.nuisance = nuisance
        self.on_call = on_call
        self.calls: list[float] = []
        self.settings: OracleSettings | None = None

    def configure(self, settings: OracleSettings) -> None:
        self.settings = settings

    def has_nuisance(self) -> bool:
        return self.nuisance

    def is_extended(self) -> bool:
        return True

    def run_test(self, r: float) -> FakeResult:
        self.calls.append(r)
        if self.on_call is not None:
            self.on_call(len(self.calls))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            return FakeResult(r=r, value=math.nan, error=-1.0, ok=False)
        return FakeResult(r=r, value=self.value_fn(r), error=self.error_fn(r, 1))

    def accumulate(self, existing: FakeResult, more: FakeResult) -> FakeResult:
        batches = existing.batches + more.batches
        return FakeResult(
            r=existing.r,
            value=self.value_fn(existing.r),
            error=self.error_fn(existing.r, batches),
            batches=batches,
        )


def linear_statistic(k: float) -> Callable[[float], float]:
    return lambda r: max(0.0, 1.0 - r / k)


@pytest.fixture
def make_oracle() -> type[FunctionOracle]:
    return FunctionOracle


@pytest.fixture
def linear() -> Callable[[float], Callable[[float], float]]:
    return linear_statistic
