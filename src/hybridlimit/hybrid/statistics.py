"""Likelihood-ratio test statistics for counting models.

Both flavors compute ``-2 ln Q`` with ``Q = L(s+b) / L(b)``; larger values
are more background-like.

- ``LEP``: nuisance parameters fixed at their nominal values.
- ``TEV``: background normalization profiled separately under each
  hypothesis, including its prior. Identical to ``LEP`` for models without a
  nuisance prior.
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

from .model import CountingModel

_INV_PHI = 0.5 * (np.sqrt(5.0) - 1.0)


def log_likelihood(counts: np.ndarray, expected: np.ndarray, *, extended: bool) -> np.ndarray:
    """Poisson (extended) or multinomial log-likelihood per row, constants dropped."""
    if extended:
        return np.sum(counts * np.log(expected) - expected, axis=1)
    total = expected.sum(axis=1, keepdims=True)
    return np.sum(counts * np.log(expected / total), axis=1)


def maximize_scalar(
    fn: Callable[[np.ndarray], np.ndarray],
    lower: float,
    upper: float,
    size: int,
    iterations: int = 48,
) -> np.ndarray:
    """Golden-section maximization of ``size`` independent unimodal functions."""
    a = np.full(size, lower, dtype=np.float64)
    b = np.full(size, upper, dtype=np.float64)
    for _ in range(iterations):
        c = b - _INV_PHI * (b - a)
        d = a + _INV_PHI * (b - a)
        left = fn(c) > fn(d)
        b = np.where(left, d, b)
        a = np.where(left, a, c)
    return 0.5 * (a + b)


def _neg2_log_q(
    counts: np.ndarray,
    model: CountingModel,
    r: float,
    theta_sb: np.ndarray | float,
    theta_b: np.ndarray | float,
) -> np.ndarray:
    ll_sb = log_likelihood(counts, model.expected(r, theta_sb), extended=model.extended)
    ll_b = log_likelihood(counts, model.expected(0.0, theta_b), extended=model.extended)
    return -2.0 * (ll_sb - ll_b)


def lep_statistic(counts: np.ndarray, model: CountingModel, r: float) -> np.ndarray:
    counts = np.atleast_2d(counts)
    ones = np.ones(counts.shape[0])
    return _neg2_log_q(counts, model, r, ones, ones)


def profile_background_scale(counts: np.ndarray, model: CountingModel, r: float) -> np.ndarray:
    """Background scale maximizing likelihood times prior for every row of ``counts``."""
    if model.nuisance is None:
        return np.ones(counts.shape[0])
    prior = model.nuisance
    lower, upper = prior.profile_range()

    def objective(theta: np.ndarray) -> np.ndarray:
        expected = r * model.signal[None, :] + theta[:, None] * model.background[None, :]
        ll = log_likelihood(counts, expected, extended=model.extended)
        return ll + prior.log_density(theta)

    return maximize_scalar(objective, lower, upper, counts.shape[0])


def tev_statistic(counts: np.ndarray, model: CountingModel, r: float) -> np.ndarray:
    counts = np.atleast_2d(counts)
    if model.nuisance is None:
        return lep_statistic(counts, model, r)
    theta_sb = profile_background_scale(counts, model, r)
    theta_b = profile_background_scale(counts, model, 0.0)
    prior_term = model.nuisance.log_density(theta_sb) - model.nuisance.log_density(theta_b)
    return _neg2_log_q(counts, model, r, theta_sb, theta_b) - 2.0 * prior_term


STATISTICS: dict[str, Callable[[np.ndarray, CountingModel, float], np.ndarray]] = {
    "LEP": lep_statistic,
    "TEV": tev_statistic,
}
