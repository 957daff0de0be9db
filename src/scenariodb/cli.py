"""Root CLI group for scenariodb with global flags and command registration."""

from __future__ import annotations

import click

from scenariodb import __version__
from scenariodb.commands import register_commands
from scenariodb.commands._context import AppContext
from scenariodb.config.settings import ScenarioDbSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="scenariodb")
@click.option("--db-url", default=None, help="SQLAlchemy database URL (overrides config).")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging to stderr.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    db_url: str | None,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """scenariodb — traffic scenario persistence CLI."""
    settings = ScenarioDbSettings.from_cli(
        config_path=config_path,
        db_url=db_url,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
