"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy store initialization and the mapping of
scenariodb errors onto stderr messages and exit codes.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, NoReturn

import click

from scenariodb.config.logging import configure_logging
from scenariodb.domain.errors import ScenarioDbError
from scenariodb.output.console import render_message

if TYPE_CHECKING:
    from scenariodb.config.settings import ScenarioDbSettings
    from scenariodb.domain.types import EntityKind
    from scenariodb.infrastructure.store import ScenarioStore


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The store is created on first use so ``--help`` and ``--version`` never
    touch the database.
    """

    def __init__(self, settings: ScenarioDbSettings) -> None:
        self.settings = settings
        self._store: ScenarioStore | None = None

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            database_url=settings.database.url,
        )

    @property
    def store(self) -> ScenarioStore:
        """The store instance (created lazily on first access)."""
        if self._store is None:
            from scenariodb.infrastructure.store import ScenarioStore

            self._store = ScenarioStore.from_settings(self.settings)
        return self._store

    def repository(self, kind: EntityKind) -> Any:
        from scenariodb.commands._kinds import KINDS

        return KINDS[kind].repository(self.store)

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None

    def fail(self, message: str) -> NoReturn:
        """Write *message* to stderr and exit with code 1."""
        click.echo(render_message("sc.error", "Error:", message), err=True)
        raise SystemExit(1)

    @contextmanager
    def handle_errors(self) -> Iterator[None]:
        """Turn scenariodb errors into a stderr message and exit code 1."""
        try:
            yield
        except ScenarioDbError as exc:
            self.fail(f"{type(exc).__name__}: {exc}")
        finally:
            self.close()
