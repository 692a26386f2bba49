"""Main CLI application."""

from pathlib import Path
from typing import Optional
import json
import logging

import structlog
import typer
from rich.console import Console
from rich.table import Table

from .. import app_api
from ..contracts.errors import BoinetError

app = typer.Typer(
    name="boinet",
    help="BOIN-ET family dose-finding trial simulator",
    no_args_is_help=True
)
console = Console()


def configure_logging(verbose: bool = False, json_logs: bool = False) -> None:
    """Configure structlog for command line runs."""
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.add_log_level,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbose else logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def _fail(e: BoinetError) -> None:
    console.print(f"❌ {e.message}", style="red")
    if e.details:
        console.print(f"Details: {e.details}")
    raise typer.Exit(1)


@app.command()
def simulate(
    config: Path = typer.Argument(..., help="Configuration file (TOML)"),
    n_sim: Optional[int] = typer.Option(None, "--n-sim", help="Override number of replications"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Override base seed"),
    n_jobs: Optional[int] = typer.Option(None, "--jobs", "-j", help="Worker processes"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines"),
):
    """Simulate a design and print its operating characteristics."""
    configure_logging(verbose, json_logs)

    try:
        cfg = app_api.load_config_from_file(config)
        cfg = app_api.apply_run_overrides(cfg, n_sim=n_sim, seed_sim=seed, n_jobs=n_jobs)

        with console.status("Running simulation..."):
            result = app_api.simulate(cfg)
    except BoinetError as e:
        _fail(e)

    table = Table(title=f"{result.design.value} operating characteristics ({result.n_sim} trials)")
    table.add_column("Dose")
    table.add_column("nETS" if result.design.is_graded else "True tox")
    table.add_column("nEES" if result.design.is_graded else "True eff")
    table.add_column("N treated")
    table.add_column("Selected (%)")
    for j in range(result.n_dose):
        table.add_row(
            str(j + 1),
            f"{result.n_ets[j]:.3f}",
            f"{result.n_ees[j]:.3f}",
            f"{result.n_patient[j]:.1f}",
            f"{result.prop_select[j]:.1f}",
        )
    console.print(table)
    console.print(
        f"lambda1={result.lambda1:.3f}  lambda2={result.lambda2:.3f}  eta1={result.eta1:.3f}"
    )
    console.print(f"Stopped without OBD: {result.prop_stop:.1f}%")
    console.print(f"Expected duration: {result.duration:.1f}")

    if output:
        output.write_text(json.dumps(result.as_dict(), indent=2))
        console.print(f"✓ Result written to {output}")


@app.command()
def validate(
    config: Path = typer.Argument(..., help="Configuration file to validate")
):
    """Validate a configuration file."""
    try:
        design = app_api.validate_configuration(app_api.load_config_from_file(config))
    except BoinetError as e:
        _fail(e)
    console.print(f"✅ Configuration is valid: {config}", style="green")
    console.print(f"Design {design.design.value}: {design.n_dose} doses, up to {design.max_patients} patients")


@app.command()
def boundaries(
    phi: float = typer.Option(0.3, "--phi", help="Target toxicity rate"),
    delta: float = typer.Option(0.6, "--delta", help="Target efficacy rate"),
    phi1: Optional[float] = typer.Option(None, "--phi1"),
    phi2: Optional[float] = typer.Option(None, "--phi2"),
    delta1: Optional[float] = typer.Option(None, "--delta1"),
):
    """Print the decision boundaries for the given targets."""
    try:
        b = app_api.boundaries(phi, delta, phi1=phi1, phi2=phi2, delta1=delta1)
    except BoinetError as e:
        _fail(e)

    table = Table(title="Decision boundaries")
    table.add_column("Boundary")
    table.add_column("Value")
    table.add_row("lambda1 (escalation)", f"{b.lambda1:.4f}")
    table.add_row("lambda2 (de-escalation)", f"{b.lambda2:.4f}")
    table.add_row("eta1 (efficacy)", f"{b.eta1:.4f}")
    console.print(table)


if __name__ == "__main__":
    app()
