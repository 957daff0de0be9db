"""Command: insert an entity from a JSON document file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import click

from scenariodb.commands._base import ScenarioCommand
from scenariodb.commands._kinds import KINDS, kind_argument
from scenariodb.domain.keys import to_key
from scenariodb.output.console import render_message

if TYPE_CHECKING:
    from scenariodb.commands._context import AppContext
    from scenariodb.domain.types import EntityKind

_IMPORT_EXAMPLES = """\
  scenariodb import network network.json
  scenariodb import demand-set demand.json
  scenariodb import scenario scenario.json
  scenariodb show demand-set 12 | scenariodb import demand-set -"""


@click.command("import", cls=ScenarioCommand, examples=_IMPORT_EXAMPLES)
@kind_argument
@click.argument("file", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def import_cmd(app: AppContext, kind: EntityKind, file: TextIO) -> None:
    """Insert the KIND described by the JSON document in FILE.

    A document without an ``id`` gets a newly allocated one.
    """
    name = getattr(file, "name", "<stdin>")
    try:
        document = json.load(file)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {Path(name).name}: {exc}"
        raise click.ClickException(msg) from exc
    if not isinstance(document, dict):
        msg = f"Expected a JSON object in {Path(name).name}"
        raise click.ClickException(msg)

    with app.handle_errors():
        try:
            entity = KINDS[kind].model.from_document(document)
        except (KeyError, TypeError, AttributeError) as exc:
            msg = f"Malformed {kind} document in {Path(name).name}: {exc!r}"
            raise click.ClickException(msg) from exc
        entity_id = app.repository(kind).insert(entity)
    click.echo(render_message("sc.ok", "Imported", f"{kind} {to_key(entity_id)}"))
