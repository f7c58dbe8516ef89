"""Tests for the counting-model test statistics."""

from __future__ import annotations

import math

import numpy as np
import pytest

from hybridlimit.core.exceptions import ModelFormatError
from hybridlimit.hybrid import CountingModel, NuisancePrior, lep_statistic, tev_statistic
from hybridlimit.hybrid.statistics import (
    log_likelihood,
    maximize_scalar,
    profile_background_scale,
)


def _single(observed: int = 0, nuisance: NuisancePrior | None = None) -> CountingModel:
    return CountingModel(signal=[1.0], background=[0.5], observed=[observed], nuisance=nuisance)


class TestCountingModel:
    def test_defaults(self) -> None:
        model = CountingModel(signal=[1.0, 2.0], background=[0.5, 0.5], observed=[0, 1])
        assert model.n_channels == 2
        assert model.channels == ("ch0", "ch1")
        assert model.parameter.maximum == 20.0

    def test_expected_shape(self) -> None:
        model = CountingModel(signal=[1.0, 2.0], background=[0.5, 0.5], observed=[0, 1])
        expected = model.expected(2.0, np.array([1.0, 2.0, 3.0]))
        assert expected.shape == (3, 2)
        np.testing.assert_allclose(expected[1], [3.0, 5.0])

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"signal": [], "background": [], "observed": []},
            {"signal": [1.0], "background": [0.5, 0.5], "observed": [0]},
            {"signal": [-1.0], "background": [0.5], "observed": [0]},
            {"signal": [1.0], "background": [0.0], "observed": [0]},
            {"signal": [1.0], "background": [0.5], "observed": [1.5]},
            {"signal": [1.0], "background": [0.5], "observed": [0], "channels": ("a", "b")},
        ],
    )
    def test_invalid_models(self, kwargs) -> None:
        with pytest.raises(ModelFormatError):
            CountingModel(**kwargs)

    def test_prior_must_have_positive_width(self) -> None:
        with pytest.raises(ModelFormatError):
            NuisancePrior(background_uncertainty=0.0)

    def test_prior_samples_are_positive(self) -> None:
        prior = NuisancePrior(background_uncertainty=2.0)
        theta = prior.sample(np.random.default_rng(0), 1000)
        assert theta.shape == (1000,)
        assert np.all(theta > 0)

    def test_profile_range_is_positive(self) -> None:
        low, high = NuisancePrior(background_uncertainty=0.5).profile_range()
        assert low == 1e-6
        assert high == 3.5


def test_lep_statistic_closed_form() -> None:
    # -2 ln Q = 2 r s - 2 n ln(1 + r s / b) for one channel
    assert lep_statistic(np.array([0.0]), _single(), 2.0)[0] == pytest.approx(4.0)
    assert lep_statistic(np.array([1.0]), _single(), 1.0)[0] == pytest.approx(
        2.0 - 2.0 * math.log(3.0)
    )


def test_lep_statistic_is_vectorized() -> None:
    counts = np.array([[0.0], [1.0], [5.0]])
    values = lep_statistic(counts, _single(), 1.0)
    assert values.shape == (3,)
    assert values[0] > values[1] > values[2]


def test_tev_equals_lep_without_prior() -> None:
    counts = np.array([[0.0], [2.0]])
    np.testing.assert_allclose(
        tev_statistic(counts, _single(), 1.5), lep_statistic(counts, _single(), 1.5)
    )


def test_tev_with_narrow_prior_is_close_to_lep() -> None:
    model = _single(nuisance=NuisancePrior(background_uncertainty=1e-3))
    counts = np.array([[0.0], [1.0], [3.0]])
    np.testing.assert_allclose(
        tev_statistic(counts, model, 1.0), lep_statistic(counts, model, 1.0), atol=1e-2
    )


def test_profiled_scale_follows_data() -> None:
    model = _single(nuisance=NuisancePrior(background_uncertainty=0.5))
    theta = profile_background_scale(np.array([[0.0], [4.0]]), model, 0.0)
    assert theta[0] < 1.0 < theta[1]


def test_profile_without_prior_is_nominal() -> None:
    theta = profile_background_scale(np.array([[0.0], [4.0]]), _single(), 1.0)
    np.testing.assert_array_equal(theta, [1.0, 1.0])


def test_maximize_scalar() -> None:
    centers = np.array([0.3, 0.7])
    result = maximize_scalar(lambda x: -((x - centers) ** 2), 0.0, 1.0, size=2)
    np.testing.assert_allclose(result, centers, atol=1e-6)


def test_non_extended_likelihood_ignores_normalization() -> None:
    counts = np.array([[1.0, 2.0]])
    expected = np.array([[1.0, 2.0]])
    a = log_likelihood(counts, expected, extended=False)
    b = log_likelihood(counts, 10.0 * expected, extended=False)
    np.testing.assert_allclose(a, b)
    assert not np.allclose(
        log_likelihood(counts, expected, extended=True),
        log_likelihood(counts, 10.0 * expected, extended=True),
    )
