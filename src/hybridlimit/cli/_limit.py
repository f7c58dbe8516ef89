"""Limit commands: limit, check."""

from __future__ import annotations

from pathlib import Path

import typer

from hybridlimit.core.config import HybridConfig, build_oracle_settings, check_config
from hybridlimit.core.exceptions import ConfigurationError, ModelFormatError
from hybridlimit.core.types import EvaluationRecord, LimitResult
from hybridlimit.hybrid import CountingModel, ToyHybridCalculator
from hybridlimit.model_loader import load_model
from hybridlimit.report import result_payload, summary_line, write_result
from hybridlimit.search import HybridLimitSearch, LoggingCallback, SearchCallback
from hybridlimit.search.callbacks import PHASE_MESSAGES, format_evaluation

from ._app import app, console
from ._rich_output import key_value_panel, result_banner, section_header, trace_table

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


class ConsoleCallback(SearchCallback):
    """Echo the progress trace to the Rich console."""

    def __init__(self, parameter: str, statistic_name: str):
        self.parameter = parameter
        self.statistic_name = statistic_name

    def on_phase_begin(self, phase: str) -> None:
        section_header(PHASE_MESSAGES.get(phase, phase))

    def on_evaluation(self, record: EvaluationRecord) -> None:
        line = format_evaluation(record, self.parameter, self.statistic_name)
        console.print(f"[hl.muted]{line}[/hl.muted]", highlight=False)


def _resolve_config(**options: object) -> HybridConfig:
    check = check_config(**options)
    if not check.ok or check.config is None:
        for error in check.errors:
            console.print(f"[hl.fail]Invalid option:[/hl.fail] {error}")
        raise typer.Exit(code=2)
    return check.config


def _load_model_or_exit(path: Path, r_max: float | None) -> CountingModel:
    try:
        model = load_model(path)
    except (ModelFormatError, FileNotFoundError) as exc:
        console.print(f"[hl.fail]Cannot load model:[/hl.fail] {exc}")
        raise typer.Exit(code=2) from None
    if r_max is None:
        return model
    try:
        parameter = model.parameter.with_maximum(r_max)
    except ConfigurationError as exc:
        console.print(f"[hl.fail]Invalid --r-max:[/hl.fail] {exc}")
        raise typer.Exit(code=2) from None
    return CountingModel(
        signal=model.signal,
        background=model.background,
        observed=model.observed,
        nuisance=model.nuisance,
        extended=model.extended,
        parameter=parameter,
        channels=model.channels,
        name=model.name,
    )


def _result_lines(result: LimitResult) -> list[str]:
    lines = [summary_line(result)]
    if result.ok:
        lines.append(f"Outcome: {result.outcome.value}")
        if result.interval is not None:
            low, high = result.interval
            lines.append(f"Interval: [{low:.6g}, {high:.6g}]")
    elif result.last_r is not None:
        lines.append(f"Last point: {result.parameter} = {result.last_r:.6g}")
    lines.append(f"Oracle batches: {result.toy_batches}")
    return lines


# ---------------------------------------------------------------------------
# limit / check
# ---------------------------------------------------------------------------


@app.command("limit", rich_help_panel="Limits")
def limit(
    model_path: Path = typer.Argument(..., help="Counting model file (.toml, .yaml or .json)."),
    toys: int = typer.Option(
        500, "--toys", "-T", help="Number of toys per batch used to compute CLs+b, CLb and CLs."
    ),
    confidence_level: float = typer.Option(0.95, "--cl", help="Confidence level of the limit."),
    cls_accuracy: float = typer.Option(
        0.005, "--cls-acc", help="Absolute accuracy on CLs to reach to terminate the scan."
    ),
    r_abs_accuracy: float = typer.Option(
        0.1, "--r-abs-acc", help="Absolute accuracy on r to reach to terminate the scan."
    ),
    r_rel_accuracy: float = typer.Option(
        0.05, "--r-rel-acc", help="Relative accuracy on r to reach to terminate the scan."
    ),
    use_cls: bool = typer.Option(
        True, "--cls/--clsplusb", help="Use CLs (default) or CLs+b as the exclusion statistic."
    ),
    test_statistic: str = typer.Option("LEP", "--test-stat", help="Test statistic: LEP, TEV."),
    r_interval: bool = typer.Option(
        False,
        "--r-interval",
        help="Also compute an interval on r after finding a point satisfying the CL.",
    ),
    with_systematics: bool = typer.Option(
        False, "--with-systematics", "-S", help="Randomize nuisance parameters in the toys."
    ),
    hint: float | None = typer.Option(
        None, "--hint", help="Rough expected limit; caps the initial upper bound at 3x hint."
    ),
    r_max: float | None = typer.Option(None, "--r-max", help="Override the initial upper bound."),
    seed: int = typer.Option(0, "--seed", help="Seed of the toy random stream."),
    output: Path | None = typer.Option(None, "--output", help="Write a JSON result artifact."),
    show_trace: bool = typer.Option(
        False, "--show-trace", help="Print a table of every evaluated point at the end."
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not echo progress lines."),
) -> None:
    """Compute an upper limit on the model's signal strength."""
    config = _resolve_config(
        toys=toys,
        confidence_level=confidence_level,
        cls_accuracy=cls_accuracy,
        r_abs_accuracy=r_abs_accuracy,
        r_rel_accuracy=r_rel_accuracy,
        use_cls=use_cls,
        test_statistic=test_statistic,
        r_interval=r_interval,
        with_systematics=with_systematics,
    )
    model = _load_model_or_exit(model_path, r_max)
    oracle = ToyHybridCalculator(model, seed=seed)

    callbacks: list[SearchCallback] = [LoggingCallback()]
    if not quiet:
        callbacks.append(ConsoleCallback(model.parameter.name, config.statistic_name))

    try:
        result = HybridLimitSearch(oracle, config, callbacks=callbacks).run(
            model.parameter, hint=hint
        )
    except ConfigurationError as exc:
        console.print(f"[hl.fail]Configuration error:[/hl.fail] {exc}")
        raise typer.Exit(code=2) from None

    if show_trace:
        console.print(trace_table(result.trace, statistic_name=config.statistic_name))
    console.print(result_banner(passed=result.ok, lines=_result_lines(result)))

    if output is not None:
        payload = result_payload(result, config, model_name=model.name, seed=seed)
        written = write_result(output, payload)
        console.print(f"[hl.muted]Result written to {written}[/hl.muted]")

    if not result.ok:
        raise typer.Exit(code=1)


@app.command("check", rich_help_panel="Limits")
def check(
    model_path: Path = typer.Argument(..., help="Counting model file (.toml, .yaml or .json)."),
    test_statistic: str = typer.Option("LEP", "--test-stat", help="Test statistic: LEP, TEV."),
    with_systematics: bool = typer.Option(
        False, "--with-systematics", "-S", help="Randomize nuisance parameters in the toys."
    ),
) -> None:
    """Validate a model file and options without throwing any toys."""
    config = _resolve_config(test_statistic=test_statistic, with_systematics=with_systematics)
    model = _load_model_or_exit(model_path, None)
    try:
        settings = build_oracle_settings(config, ToyHybridCalculator(model))
    except ConfigurationError as exc:
        console.print(f"[hl.fail]Configuration error:[/hl.fail] {exc}")
        raise typer.Exit(code=2) from None

    nuisance = model.nuisance
    console.print(
        key_value_panel(
            {
                "Model": model.name,
                "Channels": ", ".join(model.channels),
                "Parameter": (
                    f"{model.parameter.name} in "
                    f"[{model.parameter.minimum:g}, {model.parameter.maximum:g}]"
                ),
                "Extended": str(model.extended),
                "Background uncertainty": (
                    f"{nuisance.background_uncertainty:g}" if nuisance is not None else "none"
                ),
                "Test statistic": settings.test_statistic,
                "Nuisance randomization": str(settings.use_nuisance),
                "Status": "[hl.pass]OK[/hl.pass]",
            },
            title="Model Check",
        )
    )
