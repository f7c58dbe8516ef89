"""Theme-aware Rich rendering helpers shared across CLI commands."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from rich.box import ROUNDED
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

from hybridlimit.core.types import EvaluationRecord

from ._app import console
from ._theme import PANEL_PADDING, STATUS_ICONS


def section_header(title: str) -> None:
    """Print a themed section header with a horizontal rule."""
    console.print(Rule(title, style="hl.header"))


def key_value_panel(
    data: dict[str, Any],
    *,
    title: str | None = None,
    border: str = "hl.border",
) -> Panel:
    """Render a dict as an aligned key-value panel."""
    max_key_len = max((len(str(k)) for k in data), default=0)
    lines: list[str] = []
    for key, value in data.items():
        padded = str(key).ljust(max_key_len)
        lines.append(f"[hl.label]{padded}[/hl.label]  {value}")
    return Panel(
        "\n".join(lines),
        title=title,
        border_style=border,
        box=ROUNDED,
        padding=PANEL_PADDING,
    )


def result_banner(
    *,
    passed: bool,
    title: str | None = None,
    lines: Sequence[str] = (),
) -> Panel:
    """Render a success / failure banner panel."""
    if passed:
        default_title = f"{STATUS_ICONS['pass']} LIMIT FOUND"
        border = "hl.border.success"
    else:
        default_title = f"{STATUS_ICONS['fail']} NO LIMIT"
        border = "hl.border.error"

    return Panel(
        "\n".join(lines),
        title=title or default_title,
        border_style=border,
        box=ROUNDED,
        padding=PANEL_PADDING,
    )


def trace_table(
    records: Sequence[EvaluationRecord],
    *,
    statistic_name: str,
    title: str | None = None,
) -> Table:
    """Render the evaluated points of a search, one row per oracle batch."""
    table = Table(title=title)
    table.add_column("Phase", style="hl.label")
    table.add_column("r", justify="right")
    table.add_column(statistic_name, justify="right")
    table.add_column("Error", justify="right")
    table.add_column("Batches", justify="right")

    for record in records:
        if record.estimate.is_failed:
            value, error = "[hl.fail]failed[/hl.fail]", ""
        else:
            value, error = f"{record.estimate.value:.6g}", f"{record.estimate.error:.3g}"
        table.add_row(record.phase, f"{record.r:.6g}", value, error, str(record.batches))

    return table
