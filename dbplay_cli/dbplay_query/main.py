"""dbplay CLI entrypoint: a terminal host for the playground core."""

from __future__ import annotations

import asyncio
import json

import click
from rich import box
from rich.table import Table

from dbplay_cli.shared.cli import CLIContext, common_cli_options, handle_cli_errors, pass_cli_context

from .playground import Playground
from .render import status_class
from .types import EngineMode, RenderModel

MODE_CHOICES = tuple(mode.value for mode in EngineMode)
OUTPUT_FORMAT_CHOICES = ("html", "json")


@click.group(help="Query the simulated SQL, document, and cache engines.")
@common_cli_options
@handle_cli_errors
def cli(cli_ctx: CLIContext) -> None:
    """Primary Click group for dbplay commands."""
    cli_ctx.logger.debug(f"dbplay using service {cli_ctx.config.service.base_url}")


@cli.command("run")
@click.argument("query", type=str)
@click.option("--mode", type=click.Choice(MODE_CHOICES), help="Engine to query (defaults to config).")
@click.option(
    "--format",
    "output_format",
    default="html",
    show_default=True,
    type=click.Choice(OUTPUT_FORMAT_CHOICES),
)
@click.option("--no-delay", is_flag=True, help="Skip the simulated network delay for local engines.")
@pass_cli_context
@handle_cli_errors
def run_query(
    cli_ctx: CLIContext,
    query: str,
    mode: str | None,
    output_format: str,
    no_delay: bool,
) -> None:
    """Execute QUERY and print the rendered result regions."""
    config = cli_ctx.config.without_latency() if no_delay else cli_ctx.config
    playground = Playground.from_config(config, logger=cli_ctx.logger)
    if mode:
        playground.switch(mode)

    model = asyncio.run(playground.execute(query))
    _echo_model(model, output_format)


@cli.command("samples")
@click.option("--mode", type=click.Choice(MODE_CHOICES), help="Engine whose samples to list.")
@pass_cli_context
@handle_cli_errors
def list_samples(cli_ctx: CLIContext, mode: str | None) -> None:
    """List the canned queries for a mode."""
    playground = Playground.from_config(cli_ctx.config, logger=cli_ctx.logger)
    if mode:
        playground.switch(mode)
    if playground.session.mode is EngineMode.SQL:
        asyncio.run(playground.connect())

    samples = playground.session.sample_queries()
    if not samples:
        click.echo("No sample queries available.")
        return

    table = Table(title=playground.session.title, box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Title", style="bold")
    table.add_column("Query")
    for sample in samples:
        table.add_row(sample.title, sample.query)
    cli_ctx.logger.console.print(table)


@cli.command("health")
@pass_cli_context
@handle_cli_errors
def show_health(cli_ctx: CLIContext) -> None:
    """Check whether the SQL service is reachable."""
    playground = Playground.from_config(cli_ctx.config, logger=cli_ctx.logger)
    status = asyncio.run(playground.connect())

    click.echo(f"{status_class(status.connected)} ({cli_ctx.config.service.base_url})")
    if status.message:
        click.echo(status.message)
    if status.table_names:
        click.echo(f"Tables: {', '.join(status.table_names)}")
    if status.connected:
        cli_ctx.logger.success("SQL service is up.")
    else:
        cli_ctx.logger.warning("SQL service is unreachable; SQL queries will return empty results.")


def _echo_model(model: RenderModel, output_format: str) -> None:
    if output_format == "json":
        click.echo(json.dumps(model.to_payload(), indent=2, ensure_ascii=False))
        return
    click.echo(model.badge)
    click.echo(model.content)
    click.echo(model.stats_html)


def main() -> None:
    """Entry point for console_scripts."""
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
