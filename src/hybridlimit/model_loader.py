"""Counting-model file loader.

Reads ``.toml`` files with :mod:`tomllib` and ``.json`` / ``.yaml`` files with
:mod:`json` falling back to PyYAML. Layout::

    name = "two-bin"
    extended = true

    [parameter]
    name = "r"
    min = 0.0
    max = 20.0

    [nuisance]
    background_uncertainty = 0.1

    [[channels]]
    name = "bin1"
    signal = 3.0
    background = 1.2
    observed = 1
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from hybridlimit.core.exceptions import ConfigurationError, ModelFormatError
from hybridlimit.core.types import ParameterPoint
from hybridlimit.hybrid.model import CountingModel, NuisancePrior

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redefine]


def _read_raw(path: Path) -> dict[str, Any]:
    if path.suffix.lower() == ".toml":
        with path.open("rb") as f:
            try:
                loaded: Any = tomllib.load(f)
            except tomllib.TOMLDecodeError as exc:
                raise ModelFormatError(f"Invalid TOML in {path}: {exc}") from exc
    else:
        raw = path.read_text(encoding="utf-8")
        try:
            loaded = json.loads(raw)
        except json.JSONDecodeError:
            try:
                loaded = yaml.safe_load(raw)
            except yaml.YAMLError as exc:
                raise ModelFormatError(f"Failed to parse model file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ModelFormatError(f"Model file must decode to object, got {type(loaded).__name__}")
    return loaded


def _number(raw: dict[str, Any], key: str, *, where: str) -> float:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ModelFormatError(f"{where}.{key} must be a number, got {value!r}")
    return float(value)


def _parse_parameter(raw: Any) -> ParameterPoint:
    if raw is None:
        return ParameterPoint(value=1.0, minimum=0.0, maximum=20.0)
    if not isinstance(raw, dict):
        raise ModelFormatError("model.parameter must be an object")
    name = str(raw.get("name", "r"))
    minimum = _number(raw, "min", where="parameter") if "min" in raw else 0.0
    maximum = _number(raw, "max", where="parameter") if "max" in raw else 20.0
    value = _number(raw, "value", where="parameter") if "value" in raw else minimum
    try:
        return ParameterPoint(value=value, minimum=minimum, maximum=maximum, name=name)
    except ConfigurationError as exc:
        raise ModelFormatError(str(exc)) from exc


def _parse_nuisance(raw: Any) -> NuisancePrior | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ModelFormatError("model.nuisance must be an object")
    return NuisancePrior(
        background_uncertainty=_number(raw, "background_uncertainty", where="nuisance")
    )


def parse_model(raw: dict[str, Any], *, default_name: str = "counting") -> CountingModel:
    """Build a :class:`CountingModel` from an already-decoded mapping."""
    channels_raw = raw.get("channels")
    if not isinstance(channels_raw, list) or not channels_raw:
        raise ModelFormatError("model.channels must be a non-empty list")

    names: list[str] = []
    signal: list[float] = []
    background: list[float] = []
    observed: list[float] = []
    for idx, channel in enumerate(channels_raw):
        where = f"channels[{idx}]"
        if not isinstance(channel, dict):
            raise ModelFormatError(f"{where} must be an object")
        names.append(str(channel.get("name", f"ch{idx}")))
        signal.append(_number(channel, "signal", where=where))
        background.append(_number(channel, "background", where=where))
        observed.append(_number(channel, "observed", where=where))

    extended = raw.get("extended", True)
    if not isinstance(extended, bool):
        raise ModelFormatError(f"model.extended must be a boolean, got {extended!r}")

    return CountingModel(
        signal=signal,
        background=background,
        observed=observed,
        nuisance=_parse_nuisance(raw.get("nuisance")),
        extended=extended,
        parameter=_parse_parameter(raw.get("parameter")),
        channels=tuple(names),
        name=str(raw.get("name", default_name)),
    )


def load_model(path: str | Path) -> CountingModel:
    """Load and parse a counting-model file.

    Raises
    ------
    FileNotFoundError
        If the model file does not exist.
    ModelFormatError
        If the file cannot be decoded or required fields are malformed.
    """
    model_path = Path(path)
    if not model_path.exists():
        raise FileNotFoundError(f"Model file not found: {model_path}")
    return parse_model(_read_raw(model_path), default_name=model_path.stem)
