"""Tests for the shared value types."""

from __future__ import annotations

import time

import pytest

from hybridlimit.core.exceptions import ConfigurationError, SearchError, UnboundedSearchError
from hybridlimit.core.interfaces import CancellationToken, HypoTestResult
from hybridlimit.core.types import (
    ConfidenceEstimate,
    LimitResult,
    ParameterPoint,
    SearchOutcome,
    SearchState,
)


class TestParameterPoint:
    def test_rejects_inverted_range(self) -> None:
        with pytest.raises(ConfigurationError, match=r"\[mu\]"):
            ParameterPoint(value=1.0, minimum=2.0, maximum=1.0, name="mu")

    def test_hint_narrows_maximum(self) -> None:
        point = ParameterPoint(value=1.0, maximum=20.0)
        assert point.apply_hint(2.0).maximum == 6.0
        assert point.apply_hint(10.0).maximum == 20.0

    def test_unusable_hint_is_ignored(self) -> None:
        point = ParameterPoint(value=1.0, minimum=1.0, maximum=20.0)
        assert point.apply_hint(None) is point
        assert point.apply_hint(0.5) is point
        assert point.apply_hint(1.0) is point

    def test_non_positive_hint_is_ignored_below_zero_minimum(self) -> None:
        point = ParameterPoint(value=0.0, minimum=-5.0, maximum=8.0)
        assert point.apply_hint(-1.0) is point
        assert point.apply_hint(0.0) is point
        assert point.apply_hint(1.0).maximum == 3.0

    def test_copies(self) -> None:
        point = ParameterPoint(value=1.0)
        assert point.with_value(3).value == 3.0
        assert point.with_maximum(8).maximum == 8.0
        assert point.maximum == 20.0


class TestConfidenceEstimate:
    def test_failed_sentinel(self) -> None:
        failed = ConfidenceEstimate.failed()
        assert failed.is_failed
        assert failed.error == -1.0
        assert str(failed) == "failed"
        assert not ConfidenceEstimate(0.1, 0.0).is_failed

    def test_compatible_with_is_strict(self) -> None:
        estimate = ConfidenceEstimate(0.5, 0.125)
        assert estimate.compatible_with(0.25)
        assert not ConfidenceEstimate(0.5, 0.0625).compatible_with(0.25)
        assert not ConfidenceEstimate(0.05, 0.0).compatible_with(0.05)

    def test_below(self) -> None:
        assert ConfidenceEstimate(0.01, 0.01).below(0.05)
        assert not ConfidenceEstimate(0.01, 0.02).below(0.05)

    def test_str(self) -> None:
        assert str(ConfidenceEstimate(0.06, 0.016)) == "0.06 +/- 0.016"


class TestSearchState:
    def test_geometry(self) -> None:
        state = SearchState(
            r_min=4.5,
            r_max=5.0,
            cls_min=ConfidenceEstimate(0.1, 0.0),
            cls_max=ConfidenceEstimate(0.0, 0.0),
        )
        assert state.width == 0.5
        assert state.midpoint == 4.75

    def test_rejects_inverted_bracket(self) -> None:
        with pytest.raises(ValueError, match="r_min <= r_max"):
            SearchState(
                r_min=2.0,
                r_max=1.0,
                cls_min=ConfidenceEstimate(1.0, 0.0),
                cls_max=ConfidenceEstimate(0.0, 0.0),
            )


@pytest.mark.parametrize(
    ("outcome", "ok"),
    [
        (SearchOutcome.DIRECT_HIT, True),
        (SearchOutcome.CONVERGED, True),
        (SearchOutcome.ORACLE_FAILURE, False),
        (SearchOutcome.UNBOUNDED, False),
        (SearchOutcome.CANCELLED, False),
    ],
)
def test_limit_result_ok(outcome: SearchOutcome, ok: bool) -> None:
    result = LimitResult(outcome=outcome, confidence_level=0.95, statistic_name="CLs")
    assert result.ok is ok
    assert result.toy_batches == 0


def test_outcome_values_are_strings() -> None:
    assert SearchOutcome("unbounded") is SearchOutcome.UNBOUNDED
    assert SearchOutcome.DIRECT_HIT == "direct_hit"


def test_search_errors_carry_last_point() -> None:
    exc = UnboundedSearchError("too far", r=32.0, value=1.0)
    assert isinstance(exc, SearchError)
    assert (exc.r, exc.value) == (32.0, 1.0)


class TestCancellationToken:
    def test_manual_cancel(self) -> None:
        token = CancellationToken()
        assert not token.cancelled
        token.cancel()
        assert token.cancelled

    def test_deadline(self) -> None:
        token = CancellationToken(timeout_seconds=0.01)
        time.sleep(0.05)
        assert token.cancelled

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(ValueError):
            CancellationToken(timeout_seconds=0)


def test_hypotest_result_protocol_is_structural() -> None:
    class Result:
        ok = True
        cls = cls_error = clb = clb_error = clsplusb = clsplusb_error = 0.0

    assert isinstance(Result(), HypoTestResult)
    assert not isinstance(object(), HypoTestResult)
