"""CLI for memfloor."""

import sys
from pathlib import Path

import click

from memfloor.config.loader import load_config
from memfloor.config.models import ReportingUnit
from memfloor.errors import MemfloorError
from memfloor.log import configure_logging
from memfloor.main import ProbeSession
from memfloor.probe.outcome import ProbeOutcome


@click.command(
    context_settings={
        "help_option_names": ["-h", "--help"],
        "allow_interspersed_args": False,
    }
)
@click.option(
    "-c",
    "--capture-stdin",
    is_flag=True,
    help="Capture stdin and replay a fresh copy of it to every probe",
)
@click.option(
    "-p",
    "--print-output",
    "passthrough_output",
    is_flag=True,
    help="Don't redirect the command's stdout and stderr to /dev/null",
)
@click.option(
    "-u",
    "--unit",
    type=click.Choice([u.value for u in ReportingUnit], case_sensitive=False),
    help="Report in bytes (B, default), kilobytes (K) or megabytes (M)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Print every probed limit and its outcome to stderr",
)
@click.option(
    "--no-shortcut",
    is_flag=True,
    help="Always bisect, even for the first probe of a 64-bit range",
)
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (default: $MEMFLOOR_CONFIG)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Log level for structured logs on stderr",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "text"]),
    help="Structured log format",
)
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
def cli(
    capture_stdin: bool,
    passthrough_output: bool,
    unit: str | None,
    verbose: bool,
    no_shortcut: bool,
    config: Path | None,
    log_level: str | None,
    log_format: str | None,
    command: tuple[str, ...],
) -> None:
    """Find the smallest address-space limit COMMAND still succeeds under.

    COMMAND: Program to measure, followed by its arguments
    """
    try:
        settings = load_config(config)
    except (FileNotFoundError, ValueError) as e:
        click.echo(f"memfloor: {e}", err=True)
        sys.exit(1)

    # Flags given on the command line win over the config file
    probe = settings.probe
    probe.capture_stdin = probe.capture_stdin or capture_stdin
    probe.passthrough_output = probe.passthrough_output or passthrough_output
    probe.verbose = probe.verbose or verbose
    if no_shortcut:
        probe.shortcut = False
    if unit is not None:
        probe.unit = ReportingUnit.parse(unit)
    if log_level is not None:
        settings.logging.level = log_level.upper()
    if log_format is not None:
        settings.logging.format = log_format  # type: ignore[assignment]

    configure_logging(settings.logging)

    session = ProbeSession(
        command,
        settings,
        on_probe=_report_probe if probe.verbose else None,
    )

    try:
        result = session.run()
    except MemfloorError as e:
        click.echo(f"memfloor: {e}", err=True)
        sys.exit(1)

    try:
        click.echo(str(result))
        sys.stdout.flush()
    except OSError as e:
        click.echo(f"memfloor: /dev/stdout: {e.strerror or e}", err=True)
        sys.exit(1)


def _report_probe(candidate: int, outcome: ProbeOutcome) -> None:
    """Print one verbose diagnostic line for a probe."""
    click.echo(f"memfloor: {candidate} -> {outcome.describe()}", err=True)


if __name__ == "__main__":
    cli()
