"""Multi-channel counting model used by the reference toy oracle."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from hybridlimit.core.exceptions import ModelFormatError
from hybridlimit.core.types import ParameterPoint


@dataclass(frozen=True)
class NuisancePrior:
    """Gaussian prior on the background normalization, truncated at zero."""

    background_uncertainty: float

    def __post_init__(self) -> None:
        if not self.background_uncertainty > 0:
            raise ModelFormatError(
                f"background_uncertainty must be positive, got {self.background_uncertainty}"
            )

    def sample(self, rng: np.random.Generator, size: int) -> np.ndarray:
        """Draw ``size`` background scale factors."""
        theta = rng.normal(1.0, self.background_uncertainty, size=size)
        negative = theta <= 0
        while negative.any():
            redraw = int(negative.sum())
            theta[negative] = rng.normal(1.0, self.background_uncertainty, size=redraw)
            negative = theta <= 0
        return theta

    def log_density(self, theta: np.ndarray) -> np.ndarray:
        return -0.5 * ((theta - 1.0) / self.background_uncertainty) ** 2

    def profile_range(self) -> tuple[float, float]:
        width = 5.0 * self.background_uncertainty
        return max(1e-6, 1.0 - width), 1.0 + width


@dataclass(frozen=True)
class CountingModel:
    """
    Per-channel signal and background yields with the observed counts.

    Args:
        signal: Expected signal yield per channel at ``r = 1``.
        background: Expected background yield per channel (strictly positive).
        observed: Observed event count per channel.
        nuisance: Optional prior on the background normalization.
        extended: Whether the total yield enters the likelihood.
        parameter: The signal-strength parameter and its allowed range.
        channels: Optional channel names.
    """

    signal: np.ndarray
    background: np.ndarray
    observed: np.ndarray
    nuisance: NuisancePrior | None = None
    extended: bool = True
    parameter: ParameterPoint = ParameterPoint(value=1.0, minimum=0.0, maximum=20.0)
    channels: tuple[str, ...] = field(default_factory=tuple)
    name: str = "counting"

    def __post_init__(self) -> None:
        signal = np.atleast_1d(np.asarray(self.signal, dtype=np.float64))
        background = np.atleast_1d(np.asarray(self.background, dtype=np.float64))
        observed = np.atleast_1d(np.asarray(self.observed, dtype=np.float64))
        if signal.ndim != 1 or signal.size == 0:
            raise ModelFormatError(
                f"signal must be a non-empty 1-D array, got shape {signal.shape}"
            )
        if background.shape != signal.shape or observed.shape != signal.shape:
            raise ModelFormatError(
                "signal, background and observed must have one entry per channel "
                f"(got {signal.shape}, {background.shape}, {observed.shape})"
            )
        if not np.all(np.isfinite(signal)) or np.any(signal < 0):
            raise ModelFormatError("signal yields must be finite and non-negative")
        if not np.all(np.isfinite(background)) or np.any(background <= 0):
            raise ModelFormatError("background yields must be finite and positive")
        if np.any(observed < 0) or np.any(observed != np.round(observed)):
            raise ModelFormatError("observed counts must be non-negative integers")
        if self.channels and len(self.channels) != signal.size:
            raise ModelFormatError(
                f"expected {signal.size} channel names, got {len(self.channels)}"
            )
        object.__setattr__(self, "signal", signal)
        object.__setattr__(self, "background", background)
        object.__setattr__(self, "observed", observed)
        if not self.channels:
            names = tuple(f"ch{idx}" for idx in range(signal.size))
            object.__setattr__(self, "channels", names)

    @property
    def n_channels(self) -> int:
        return int(self.signal.size)

    def expected(self, r: float, theta: np.ndarray | float = 1.0) -> np.ndarray:
        """Expected yields, shape ``(len(theta), n_channels)``."""
        theta_arr = np.atleast_1d(np.asarray(theta, dtype=np.float64))
        return r * self.signal[None, :] + theta_arr[:, None] * self.background[None, :]
