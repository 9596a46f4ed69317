"""CLI command running the admission checks over a request body."""

from __future__ import annotations

import json
import sys
from typing import BinaryIO

import click
from rich.table import Table

from gqlguard.console import GuardCommandError, console, truncate


@click.command()
@click.argument("request_file", type=click.File("rb"))
@click.option(
    "--config",
    "config_path",
    required=True,
    envvar="GQLGUARD_CONFIG",
    type=click.Path(exists=True, dir_okay=False),
    help="Guard configuration (YAML). Defaults to $GQLGUARD_CONFIG.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the error body as JSON")
def check(request_file: BinaryIO, config_path: str, as_json: bool) -> None:
    """Run the configured checks on a GraphQL request body (use - for stdin)."""
    from gqlguard.admission.checks import build_checks
    from gqlguard.admission.config import load_config
    from gqlguard.admission.pipeline import AdmissionPipeline
    from gqlguard.admission.request import parse_request_body
    from gqlguard.analysis.errors import ConfigError, DocumentSyntaxError

    try:
        checks = build_checks(load_config(config_path))
    except ConfigError as e:
        raise click.BadParameter(str(e), param_hint="--config") from e

    try:
        request = parse_request_body(request_file.read())
    except DocumentSyntaxError as e:
        raise GuardCommandError(str(e)) from e

    result = AdmissionPipeline(checks).evaluate(request)

    if as_json:
        body = result.error_response()
        click.echo(json.dumps({"status": result.status, "body": body}, indent=2))
    else:
        _print_outcomes(request.operation_name, result)

    if not result.allowed:
        sys.exit(1)


def _print_outcomes(operation_name, result) -> None:
    """Print one table row per check that ran."""
    table = Table(title=f"Admission: {truncate(operation_name or '<anonymous>', 40)}")
    table.add_column("Check", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Result")

    for outcome in result.outcomes:
        if outcome.allowed:
            verdict = "[green]allowed[/green]"
        else:
            verdict = f"[red]{outcome.status} {outcome.message}[/red]"
        table.add_row(
            outcome.check,
            "-" if outcome.value is None else str(outcome.value),
            "-" if outcome.limit is None else str(outcome.limit),
            verdict,
        )
    console.print(table)
