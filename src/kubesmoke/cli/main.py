"""Main CLI entry point for kubesmoke."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click
from rich.console import Console

from kubesmoke import __version__

if TYPE_CHECKING:
    from kubesmoke.core.config import SmokeTestConfig
    from kubesmoke.core.models import SmokeTestReport

console = Console()


class SmokeContext:
    """Shared context for CLI commands with lazy initialization."""

    def __init__(self, config_path: str | None):
        """Initialize context with config path.

        Args:
            config_path: Path to configuration file (optional)
        """
        self.config_path = config_path
        self._config: SmokeTestConfig | None = None

    @property
    def config(self) -> SmokeTestConfig:
        """Get or create config lazily."""
        if self._config is None:
            from kubesmoke.core.config import SmokeTestConfig

            if self.config_path:
                self._config = SmokeTestConfig.from_file(self.config_path)
            else:
                self._config = SmokeTestConfig()
        return self._config

    def setup_logging(self) -> None:
        """Configure logging from the loaded configuration."""
        from kubesmoke.utils.logging import setup_logging

        logging_config = self.config.logging
        setup_logging(
            level=logging_config.level,
            format=logging_config.format,
            output=logging_config.output,
        )


def _read_kubeconfigs(paths: tuple[str, ...]) -> list[bytes]:
    """Read kubeconfig files as raw documents."""
    from pathlib import Path

    return [Path(path).expanduser().read_bytes() for path in paths]


def _print_report(report: SmokeTestReport) -> None:
    """Print a per-cluster, per-check summary table."""
    from rich.table import Table

    table = Table(title=f"Smoke Test Results ({len(report.clusters)} clusters)")
    table.add_column("Cluster", style="cyan")
    table.add_column("Check", style="magenta")
    table.add_column("Ready", style="blue")
    table.add_column("Result", style="bold")
    table.add_column("Message")

    for cluster_name, cluster in report.clusters.items():
        if cluster.error:
            table.add_row(cluster_name, "-", "-", "[red]ERROR[/red]", cluster.error)
            continue

        for result in cluster.results:
            ready = f"{result.report.ready}/{result.report.total}" if result.report else "-"
            if result.passed:
                status = "[green]PASS[/green]"
            elif result.critical:
                status = "[red]FAIL[/red]"
            else:
                status = "[yellow]WARN[/yellow]"
            table.add_row(cluster_name, result.check_name, ready, status, result.message)

    console.print(table)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(exists=True),
    default=None,
    help="Path to configuration file",
)
@click.pass_context
def cli(ctx: click.Context, config: str | None) -> None:
    """Kubernetes Smoke Test (kubesmoke) - Assert freshly provisioned clusters are ready."""
    console.print(f"[bold cyan]kubesmoke[/bold cyan] [bold]v{__version__}[/bold]\n")

    ctx.obj = SmokeContext(config_path=config)


@cli.command()
@click.option(
    "--stack-export",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Exported stack deployment (JSON)",
)
@click.option(
    "--kubeconfig",
    "kubeconfigs",
    required=True,
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Kubeconfig of a cluster under test (repeatable)",
)
@click.option(
    "--max-concurrent",
    type=click.IntRange(min=1),
    default=None,
    help="Max clusters evaluated at once",
)
@click.pass_context
def run(
    ctx: click.Context,
    stack_export: str,
    kubeconfigs: tuple[str, ...],
    max_concurrent: int | None,
) -> None:
    """Wait for every cluster to become ready and report the outcome."""
    import asyncio

    from kubesmoke.capacity.extractor import load_stack_resources
    from kubesmoke.core.exceptions import KubeSmokeError
    from kubesmoke.runner.smoke_runner import run_smoke_test
    from kubesmoke.utils.logging import get_logger

    smoke_ctx = ctx.obj
    try:
        config = smoke_ctx.config
        smoke_ctx.setup_logging()
        if max_concurrent is not None:
            config.execution.max_parallel_clusters = max_concurrent

        logger = get_logger(__name__)

        console.print(f"Stack export: {stack_export}")
        console.print(f"Clusters: {len(kubeconfigs)}")
        console.print(
            f"Retry budget: {config.retry.max_attempts} attempts, "
            f"{config.retry.interval_seconds}s interval, "
            f"up to {config.retry.max_wait_seconds:g}s per resource\n"
        )

        resources = load_stack_resources(stack_export)
        credentials = _read_kubeconfigs(kubeconfigs)

        report = asyncio.run(run_smoke_test(resources, *credentials, config=config))
    except (KubeSmokeError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(2) from e

    _print_report(report)

    if not report.passed:
        console.print("\n[bold red]Smoke test failed[/bold red]")
        for line in report.failures:
            console.print(f"  - {line}")
        logger.error("smoke_test_failed", failures=len(report.failures))
        raise SystemExit(1)

    console.print("\n[bold green]All clusters ready[/bold green]")


@cli.command(name="validate-kubeconfig")
@click.argument(
    "kubeconfigs",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False),
)
@click.pass_context
def validate_kubeconfig(ctx: click.Context, kubeconfigs: tuple[str, ...]) -> None:
    """Resolve kubeconfigs and show the cluster name derived from each."""
    from rich.table import Table

    from kubesmoke.clients.kubernetes_client import resolve_credential
    from kubesmoke.core.exceptions import KubeSmokeError
    from kubesmoke.utils.kubeconfig import cluster_name_from_exec_args

    try:
        index = ctx.obj.config.credentials.cluster_name_arg_index
    except KubeSmokeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(2) from e

    table = Table(title="Kubeconfigs")
    table.add_column("File", style="cyan")
    table.add_column("Cluster", style="magenta")
    table.add_column("Server", style="blue")
    table.add_column("Status", style="bold")

    invalid = 0
    for path in kubeconfigs:
        try:
            with open(path, "rb") as f:
                handle = resolve_credential(f.read())
            cluster_name = cluster_name_from_exec_args(handle.kubeconfig, index)
            table.add_row(path, cluster_name, handle.host, "[green]valid[/green]")
        except (KubeSmokeError, OSError) as e:
            invalid += 1
            table.add_row(path, "-", "-", f"[red]{e}[/red]")

    console.print(table)

    if invalid:
        raise SystemExit(1)


@cli.command()
@click.option(
    "--stack-export",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Exported stack deployment (JSON)",
)
@click.option("--format", type=click.Choice(["table", "json"]), default="table")
@click.pass_context
def capacity(ctx: click.Context, stack_export: str, format: str) -> None:
    """Show the expected worker node count per cluster."""
    import json

    from rich.table import Table

    from kubesmoke.capacity.extractor import extract_expected_capacity, load_stack_resources
    from kubesmoke.capacity.naming import WorkerTagNamingStrategy
    from kubesmoke.core.exceptions import KubeSmokeError

    try:
        capacity_config = ctx.obj.config.capacity
        expected = extract_expected_capacity(
            load_stack_resources(stack_export),
            naming=WorkerTagNamingStrategy(
                tag_key=capacity_config.name_tag,
                delimiter=capacity_config.worker_delimiter,
            ),
            prefix=capacity_config.resource_prefix,
            template_output=capacity_config.template_output,
        )
    except KubeSmokeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(2) from e

    if format == "json":
        print(json.dumps(expected, indent=2, sort_keys=True))
        return

    table = Table(title=f"Expected Capacity ({len(expected)} clusters)")
    table.add_column("Cluster", style="cyan")
    table.add_column("Desired Nodes", style="green", justify="right")
    for cluster_name, count in sorted(expected.items()):
        table.add_row(cluster_name or "(unnamed)", str(count))

    console.print(table)


if __name__ == "__main__":
    cli()
