"""Tests for the toy hybrid calculator."""

from __future__ import annotations

import math

import numpy as np
import pytest

from hybridlimit.core.config import HybridConfig, OracleSettings
from hybridlimit.core.exceptions import ConfigurationError
from hybridlimit.core.interfaces import ConfidenceOracle, HypoTestResult
from hybridlimit.core.types import ParameterPoint, SearchOutcome
from hybridlimit.hybrid import CountingModel, NuisancePrior, ToyHybridCalculator, ToyResult
from hybridlimit.search import HybridLimitSearch


def _model(**kwargs) -> CountingModel:
    defaults = {"signal": [1.0], "background": [0.5], "observed": [0]}
    defaults.update(kwargs)
    return CountingModel(**defaults)


def _settings(toys: int = 200, statistic: str = "LEP", nuisance: bool = False) -> OracleSettings:
    return OracleSettings(toys=toys, test_statistic=statistic, use_nuisance=nuisance)


class TestToyResult:
    def _result(self) -> ToyResult:
        return ToyResult(
            r=1.0,
            observed=3.0,
            sb_samples=np.array([1.0, 2.0, 3.0, 4.0]),
            b_samples=np.array([2.0, 3.0, 4.0, 5.0]),
        )

    def test_probabilities(self) -> None:
        result = self._result()
        assert result.ok
        assert result.n_toys == 4
        assert result.clsplusb == 0.5
        assert result.clb == 0.75
        assert result.cls == pytest.approx(2.0 / 3.0)
        assert result.clsplusb_error == pytest.approx(0.25)
        assert result.clb_error == pytest.approx(math.sqrt(0.75 * 0.25 / 4))
        assert result.cls_error > 0

    def test_zero_clb(self) -> None:
        result = ToyResult(
            r=1.0, observed=10.0, sb_samples=np.array([1.0]), b_samples=np.array([1.0])
        )
        assert result.cls == 1.0
        assert result.cls_error == 0.0

    def test_merge_concatenates(self) -> None:
        merged = self._result().merge(self._result())
        assert merged.n_toys == 8
        assert merged.clsplusb == 0.5

    def test_merge_mismatch(self) -> None:
        other = ToyResult(
            r=2.0, observed=3.0, sb_samples=np.array([1.0]), b_samples=np.array([1.0])
        )
        with pytest.raises(ValueError, match="cannot merge"):
            self._result().merge(other)

    def test_merge_with_failure(self) -> None:
        failure = ToyResult.failure(1.0, "boom")
        assert not failure.ok
        assert not self._result().merge(failure).ok
        assert not failure.merge(self._result()).ok

    def test_satisfies_result_protocol(self) -> None:
        assert isinstance(self._result(), HypoTestResult)


class TestToyHybridCalculator:
    def test_satisfies_oracle_protocol(self) -> None:
        assert isinstance(ToyHybridCalculator(_model()), ConfidenceOracle)

    def test_requires_configuration(self) -> None:
        with pytest.raises(ConfigurationError, match="configure"):
            ToyHybridCalculator(_model()).run_test(1.0)

    def test_nuisance_requires_prior(self) -> None:
        calculator = ToyHybridCalculator(_model())
        assert not calculator.has_nuisance()
        with pytest.raises(ConfigurationError):
            calculator.configure(_settings(nuisance=True))

    def test_unknown_statistic(self) -> None:
        with pytest.raises(ConfigurationError):
            ToyHybridCalculator(_model()).configure(_settings(statistic="XYZ"))

    def test_negative_r_fails(self) -> None:
        calculator = ToyHybridCalculator(_model())
        calculator.configure(_settings())
        result = calculator.run_test(-1.0)
        assert not result.ok
        assert "finite" in result.reason

    def test_batch_size_and_accumulation(self) -> None:
        calculator = ToyHybridCalculator(_model())
        calculator.configure(_settings(toys=150))
        first = calculator.run_test(1.0)
        merged = calculator.accumulate(first, calculator.run_test(1.0))
        assert first.n_toys == 150
        assert merged.n_toys == 300

    def test_seeded_runs_are_reproducible(self) -> None:
        values = []
        for _ in range(2):
            calculator = ToyHybridCalculator(_model(), seed=11)
            calculator.configure(_settings())
            values.append(calculator.run_test(2.0).cls)
        assert values[0] == values[1]

    def test_statistic_matches_closed_form_for_zero_observed(self) -> None:
        # n = 0: CLs+b = exp(-(r s + b)), CLb = exp(-b), CLs = exp(-r s)
        calculator = ToyHybridCalculator(_model(), seed=5)
        calculator.configure(_settings(toys=20000))
        result = calculator.run_test(1.0)
        assert result.clb == pytest.approx(math.exp(-0.5), abs=0.02)
        assert result.cls == pytest.approx(math.exp(-1.0), abs=0.03)

    def test_tev_with_nuisance_runs(self) -> None:
        model = _model(nuisance=NuisancePrior(background_uncertainty=0.2))
        calculator = ToyHybridCalculator(model, seed=3)
        calculator.configure(_settings(statistic="TEV", nuisance=True))
        result = calculator.run_test(1.5)
        assert result.ok
        assert 0.0 <= result.cls <= 1.0

    def test_non_extended_model(self) -> None:
        model = _model(signal=[2.0, 0.1], background=[1.0, 1.0], observed=[0, 2], extended=False)
        calculator = ToyHybridCalculator(model, seed=1)
        assert not calculator.is_extended()
        calculator.configure(_settings())
        result = calculator.run_test(1.0)
        assert result.ok
        assert 0.0 <= result.clsplusb <= 1.0


def test_limit_on_zero_observed_counting_model() -> None:
    # exact CLs = exp(-r) gives r = ln(20) ~ 3.0 at 95% CL
    model = _model(parameter=ParameterPoint(value=1.0, minimum=0.0, maximum=1.0))
    oracle = ToyHybridCalculator(model, seed=2024)
    result = HybridLimitSearch(oracle, HybridConfig(toys=2000)).run(model.parameter)

    assert result.ok
    assert result.outcome in (SearchOutcome.DIRECT_HIT, SearchOutcome.CONVERGED)
    assert 2.5 < result.limit < 3.6
    assert oracle.settings is not None
    assert oracle.settings.toys == 2000


def test_negative_parameter_minimum_never_throws_at_negative_r() -> None:
    # exact CLs = exp(-10 r) gives r = ln(20) / 10 ~ 0.3 at 95% CL
    model = _model(
        signal=[10.0], parameter=ParameterPoint(value=0.0, minimum=-5.0, maximum=8.0)
    )
    oracle = ToyHybridCalculator(model, seed=1)
    result = HybridLimitSearch(oracle, HybridConfig(toys=1000)).run(model.parameter)

    assert result.ok, result.message
    assert all(record.r >= 0.0 for record in result.trace)
    assert 0.15 < result.limit < 0.5
