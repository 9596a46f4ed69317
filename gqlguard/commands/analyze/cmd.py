"""CLI commands measuring a single operation file: depth and cost."""

from __future__ import annotations

from pathlib import Path
import sys

import click
import yaml

from gqlguard.console import GuardCommandError, console


@click.command()
@click.argument("operation_path", type=click.Path(exists=True, dir_okay=False))
@click.option("-n", "--operation-name", default=None, help="Operation to measure")
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Fail if deeper than this")
def depth(operation_path: str, operation_name: str | None, limit: int | None) -> None:
    """Print the nesting depth of an operation."""
    from gqlguard.analysis.depth import compute_depth
    from gqlguard.analysis.errors import GuardError

    text = Path(operation_path).read_text(encoding="utf-8")
    try:
        value = compute_depth(text, operation_name)
    except GuardError as e:
        raise GuardCommandError(str(e)) from e

    _report("depth", value, limit)


@click.command()
@click.argument("operation_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-s",
    "--schema",
    "schema_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Schema SDL file",
)
@click.option(
    "-c",
    "--cost-map",
    "cost_map_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="YAML mapping of Type.field coordinates to weights",
)
@click.option("-n", "--operation-name", default=None, help="Operation to measure")
@click.option("--max-cost", type=click.IntRange(min=0), default=None, help="Fail above this cost")
def cost(
    operation_path: str,
    schema_path: str,
    cost_map_path: str | None,
    operation_name: str | None,
    max_cost: int | None,
) -> None:
    """Print the static field cost of an operation."""
    from gqlguard.analysis.cost import compute_cost
    from gqlguard.analysis.errors import GuardError

    schema_text = Path(schema_path).read_text(encoding="utf-8")
    text = Path(operation_path).read_text(encoding="utf-8")
    cost_map = _load_cost_map(cost_map_path, schema_text)
    try:
        value = compute_cost(schema_text, text, operation_name, cost_map)
    except GuardError as e:
        raise GuardCommandError(str(e)) from e

    _report("cost", int(value), max_cost)


def _load_cost_map(path: str | None, schema_text: str) -> dict[str, int]:
    """Read and validate a cost map file; an absent path means all weights are 1."""
    from gqlguard.admission.config import OperationCostConfig, validate_settings
    from gqlguard.analysis.errors import ConfigError

    if path is None:
        return {}
    try:
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise click.BadParameter(f"invalid YAML: {e}", param_hint="--cost-map") from e
    try:
        config = validate_settings(
            OperationCostConfig,
            "cost map",
            {"max_cost": 0, "cost_map": raw, "schema_text": schema_text},
        )
    except ConfigError as e:
        raise click.BadParameter(str(e), param_hint="--cost-map") from e
    return config.cost_map


def _report(measure: str, value: int, limit: int | None) -> None:
    console.print(f"[bold]Operation {measure}:[/bold] {value}")
    if limit is None:
        return
    if value > limit:
        console.print(f"[red]operation {measure} exceeded limit ({value} > {limit})[/red]")
        sys.exit(1)
    console.print(f"[green]within limit ({limit})[/green]")
