"""Command: delete one stored entity with all of its dependent rows."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from scenariodb.commands._base import ScenarioCommand
from scenariodb.commands._kinds import kind_argument
from scenariodb.domain.keys import from_key
from scenariodb.output.console import render_message

if TYPE_CHECKING:
    from scenariodb.commands._context import AppContext
    from scenariodb.domain.types import EntityKind

_DELETE_EXAMPLES = """\
  scenariodb delete network 7
  scenariodb delete fd-set 3"""


@click.command("delete", cls=ScenarioCommand, examples=_DELETE_EXAMPLES)
@kind_argument
@click.argument("entity_id")
@click.pass_obj
def delete(app: AppContext, kind: EntityKind, entity_id: str) -> None:
    """Delete the KIND with ENTITY_ID. Deleting a missing id succeeds."""
    with app.handle_errors():
        app.repository(kind).delete(from_key(entity_id))
    click.echo(render_message("sc.ok", "Deleted", f"{kind} {entity_id}"))
