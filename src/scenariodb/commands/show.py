"""Command: print one stored entity as its canonical JSON document."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from scenariodb.commands._base import ScenarioCommand
from scenariodb.commands._kinds import kind_argument
from scenariodb.domain.keys import from_key
from scenariodb.output.console import render_document

if TYPE_CHECKING:
    from scenariodb.commands._context import AppContext
    from scenariodb.domain.types import EntityKind

_SHOW_EXAMPLES = """\
  scenariodb show network 7
  scenariodb show demand-set 12 > demand.json"""


@click.command("show", cls=ScenarioCommand, examples=_SHOW_EXAMPLES)
@kind_argument
@click.argument("entity_id")
@click.pass_obj
def show(app: AppContext, kind: EntityKind, entity_id: str) -> None:
    """Print the KIND with ENTITY_ID as JSON. Exits 1 if it does not exist."""
    with app.handle_errors():
        entity = app.repository(kind).read(from_key(entity_id))
    if entity is None:
        app.fail(f"{kind} {entity_id} not found")
    click.echo(render_document(entity.to_document()))
