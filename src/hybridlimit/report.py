"""Serialization of limit results into JSON artifacts and text summaries."""

from __future__ import annotations

import json
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from hybridlimit.core.config import HybridConfig
from hybridlimit.core.types import LimitResult

RESULT_SCHEMA_VERSION = "hybridlimit.limit.v1"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _round_float(value: float | None) -> float | None:
    if value is None:
        return None
    return float(f"{value:.10f}")


def summary_line(result: LimitResult) -> str:
    """Return the one-line verdict for ``result``."""
    if not result.ok:
        return f"No limit ({result.outcome.value}): {result.message}"
    return (
        f"Limit: {result.parameter} < {result.limit:.6g} +/- {result.uncertainty:.6g} "
        f"@ {result.confidence_level * 100:g}% CL"
    )


def result_payload(
    result: LimitResult,
    config: HybridConfig,
    *,
    model_name: str | None = None,
    seed: int | None = None,
) -> dict[str, Any]:
    """Build a JSON-serializable artifact describing one search."""
    interval = None
    if result.interval is not None:
        interval = [_round_float(result.interval[0]), _round_float(result.interval[1])]
    bracket = None
    if result.state is not None:
        bracket = [_round_float(result.state.r_min), _round_float(result.state.r_max)]

    return {
        "schema_version": RESULT_SCHEMA_VERSION,
        "generated_at": _utc_now_iso(),
        "model": model_name,
        "seed": seed,
        "config": config.to_dict(),
        "result": {
            "ok": result.ok,
            "outcome": result.outcome.value,
            "parameter": result.parameter,
            "statistic": result.statistic_name,
            "confidence_level": _round_float(result.confidence_level),
            "limit": _round_float(result.limit),
            "uncertainty": _round_float(result.uncertainty),
            "interval": interval,
            "bracket": bracket,
            "last_r": _round_float(result.last_r),
            "last_value": _round_float(result.last_value),
            "message": result.message,
            "toy_batches": result.toy_batches,
        },
        "trace": [
            {
                "phase": record.phase,
                "r": _round_float(record.r),
                "value": _round_float(record.estimate.value),
                "error": _round_float(record.estimate.error),
                "batches": record.batches,
            }
            for record in result.trace
        ],
        "runtime": {
            "python": sys.version.split()[0],
            "platform": platform.platform(),
        },
    }


def write_result(path: str | Path, payload: dict[str, Any]) -> Path:
    """Write ``payload`` as pretty-printed JSON, creating parent directories."""
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    return output
