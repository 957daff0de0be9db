"""Command: database initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from scenariodb.commands._base import ScenarioCommand
from scenariodb.output.console import render_message

if TYPE_CHECKING:
    from scenariodb.commands._context import AppContext

_INIT_EXAMPLES = """\
  scenariodb init
  scenariodb --db-url sqlite:///tmp/scenario.db init
  SCENARIODB_DATABASE__URL=postgresql+psycopg://user@host/scenarios scenariodb init"""


@click.command("init", cls=ScenarioCommand, examples=_INIT_EXAMPLES)
@click.pass_obj
def init_cmd(app: AppContext) -> None:
    """Create all tables and seed id counters. Safe to run repeatedly."""
    with app.handle_errors():
        url = app.store.engine.url.render_as_string(hide_password=True)
    click.echo(render_message("sc.ok", "Initialized", url))
