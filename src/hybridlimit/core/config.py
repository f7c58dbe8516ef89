"""Search configuration for hybridlimit."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .interfaces import ConfidenceOracle

TEST_STATISTICS: dict[str, int] = {"LEP": 1, "TEV": 3}


@dataclass(frozen=True)
class HybridConfig:
    """
    Configuration for one upper-limit search.

    Args:
        toys: Number of toy replicas per oracle batch.
        confidence_level: Target confidence level of the limit.
        cls_accuracy: Absolute accuracy on the exclusion statistic.
        r_abs_accuracy: Absolute accuracy on the parameter.
        r_rel_accuracy: Relative accuracy on the parameter.
        use_cls: Use CLs if true, CLs+b otherwise.
        test_statistic: Test statistic flavor, ``"LEP"`` or ``"TEV"``.
        r_interval: Refine an interval around the limit after a direct hit.
        with_systematics: Randomize nuisance parameters in the toys.
        max_expansion_ratio: Give up bracket expansion once the trial value
            reaches this multiple of the initial upper bound.

    Example:
        >>> config = HybridConfig(toys=1000, test_statistic="TEV")
        >>> config.save("hybrid.json")
        >>> loaded = HybridConfig.load("hybrid.json")
    """

    toys: int = 500
    confidence_level: float = 0.95
    cls_accuracy: float = 0.005
    r_abs_accuracy: float = 0.1
    r_rel_accuracy: float = 0.05
    use_cls: bool = True
    test_statistic: str = "LEP"
    r_interval: bool = False
    with_systematics: bool = False
    max_expansion_ratio: float = 20.0

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Raises:
            ConfigurationError: If any configuration values are invalid.
        """
        errors = _validation_errors(asdict(self))
        if errors:
            raise ConfigurationError(errors[0])

    @property
    def cls_target(self) -> float:
        """Statistic value the bisection aims for."""
        return 1.0 - self.confidence_level

    @property
    def statistic_name(self) -> str:
        return "CLs" if self.use_cls else "CLsplusb"

    @property
    def test_statistic_code(self) -> int:
        return TEST_STATISTICS[self.test_statistic]

    def r_tolerance(self, r: float) -> float:
        """Bracket width below which the search on ``r`` stops."""
        return max(self.r_abs_accuracy, self.r_rel_accuracy * r)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HybridConfig:
        """Create config from dictionary."""
        return cls(**d)

    def save(self, path: str | Path) -> None:
        """Save config to JSON file."""
        filepath = Path(path)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str | Path) -> HybridConfig:
        """Load config from JSON file."""
        with open(path) as f:
            d = json.load(f)
        return cls.from_dict(d)

    def with_updates(self, **kwargs: Any) -> HybridConfig:
        """Return a new config with updated values.

        Raises:
            ConfigurationError: If updated values are invalid.
        """
        d = self.to_dict()
        d.update(kwargs)
        return HybridConfig.from_dict(d)


def _validation_errors(values: dict[str, Any]) -> list[str]:
    errors: list[str] = []
    if values["toys"] <= 0:
        errors.append(f"toys must be positive, got {values['toys']}")
    if not 0.0 < values["confidence_level"] < 1.0:
        errors.append(f"confidence_level must be in (0, 1), got {values['confidence_level']}")
    if values["cls_accuracy"] <= 0:
        errors.append(f"cls_accuracy must be positive, got {values['cls_accuracy']}")
    if values["r_abs_accuracy"] <= 0:
        errors.append(f"r_abs_accuracy must be positive, got {values['r_abs_accuracy']}")
    if values["r_rel_accuracy"] < 0:
        errors.append(f"r_rel_accuracy must be non-negative, got {values['r_rel_accuracy']}")
    if values["test_statistic"] not in TEST_STATISTICS:
        errors.append(
            "test statistics should be one of 'LEP' or 'TEV', "
            f"and not '{values['test_statistic']}'"
        )
    if values["max_expansion_ratio"] <= 1.0:
        errors.append(f"max_expansion_ratio must be > 1, got {values['max_expansion_ratio']}")
    return errors


@dataclass(frozen=True)
class ConfigCheck:
    """Outcome of validating caller-supplied options before a search."""

    config: HybridConfig | None
    errors: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.config is not None and not self.errors


def check_config(**options: Any) -> ConfigCheck:
    """Validate options and report every problem instead of raising.

    Unknown option names are reported as errors as well.
    """
    known = set(HybridConfig.__dataclass_fields__)
    unknown = sorted(set(options) - known)
    if unknown:
        return ConfigCheck(config=None, errors=tuple(f"unknown option '{k}'" for k in unknown))
    defaults = {name: f.default for name, f in HybridConfig.__dataclass_fields__.items()}
    try:
        errors = _validation_errors({**defaults, **options})
    except TypeError as exc:
        return ConfigCheck(config=None, errors=(f"invalid option type: {exc}",))
    if errors:
        return ConfigCheck(config=None, errors=tuple(errors))
    return ConfigCheck(config=HybridConfig(**options))


@dataclass(frozen=True)
class OracleSettings:
    """Settings handed to the oracle once per search."""

    toys: int
    test_statistic: str
    use_nuisance: bool
    extended: bool = True
    extras: dict[str, Any] = field(default_factory=dict)

    @property
    def test_statistic_code(self) -> int:
        return TEST_STATISTICS[self.test_statistic]


def build_oracle_settings(config: HybridConfig, oracle: ConfidenceOracle) -> OracleSettings:
    """Derive oracle settings from ``config`` and check them against ``oracle``.

    Raises:
        ConfigurationError: If systematics are requested but the oracle has no
            nuisance parameters or no nuisance prior.
    """
    if config.with_systematics and not oracle.has_nuisance():
        raise ConfigurationError(
            "nuisances or nuisance prior not set. "
            "Perhaps you wanted to run with no systematics?",
            config_name="with_systematics",
        )
    return OracleSettings(
        toys=config.toys,
        test_statistic=config.test_statistic,
        use_nuisance=config.with_systematics,
        extended=oracle.is_extended(),
    )
