"""ScenarioStore: scoped connection and transaction handles.

The store owns the SQLAlchemy engine and hands out two kinds of scope:

- :meth:`ScenarioStore.transaction`: one atomic unit. Commits when the
  block exits normally; rolls back on every other exit path (exceptions,
  generator close, interrupts). The connection is always released.
- :meth:`ScenarioStore.connect`: a plain connection for reads that do not
  need isolation from concurrent writers.

Driver exceptions are translated into the scenariodb error taxonomy at both
scopes so that callers never need to import SQLAlchemy to tell a duplicate id
from an unreachable database.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import DBAPIError, IntegrityError

from scenariodb.domain.errors import ConnectivityError, ConstraintError, StoreError
from scenariodb.domain.types import DuplicatePolicy
from scenariodb.infrastructure.database.engine import create_db_engine, init_database

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from scenariodb.config.settings import ScenarioDbSettings

logger = structlog.get_logger(__name__)


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise driver errors as scenariodb errors."""
    try:
        yield
    except IntegrityError as exc:
        msg = f"Constraint violated: {exc.orig}"
        raise ConstraintError(msg) from exc
    except DBAPIError as exc:
        if exc.connection_invalidated:
            msg = f"Connection lost: {exc.orig}"
            raise ConnectivityError(msg) from exc
        msg = f"Store error: {exc.orig}"
        raise StoreError(msg) from exc


@dataclass
class StoreTransaction:
    """Active transaction context passed to repository operations.

    Repositories that receive a ``StoreTransaction`` join it rather than
    opening their own, so several operations commit or roll back together.
    """

    conn: Connection
    store: ScenarioStore = field(repr=False)

    @property
    def duplicate_policy(self) -> DuplicatePolicy:
        return self.store.duplicate_policy


class ScenarioStore:
    """Owner of the engine and the transaction discipline.

    Build it from settings (the CLI path) or from an existing engine (tests,
    embedding applications)::

        store = ScenarioStore.from_url("sqlite:///scenario.db")
        with store.transaction() as txn:
            NetworkRepository(store).insert(network, txn=txn)
            DemandSetRepository(store).insert(demand_set, txn=txn)
    """

    def __init__(
        self,
        engine: Engine,
        *,
        duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST_WINS,
        initialize: bool = True,
    ) -> None:
        self._engine = engine
        self._duplicate_policy = duplicate_policy
        if initialize:
            try:
                init_database(engine)
            except DBAPIError as exc:
                msg = f"Cannot initialize database at {engine.url!r}: {exc.orig}"
                raise ConnectivityError(msg) from exc

    @classmethod
    def from_settings(cls, settings: ScenarioDbSettings) -> ScenarioStore:
        db = settings.database
        engine = create_db_engine(db.url, echo=db.echo, pool_pre_ping=db.pool_pre_ping)
        return cls(engine, duplicate_policy=settings.hydration.on_duplicate)

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST_WINS,
    ) -> ScenarioStore:
        return cls(create_db_engine(url), duplicate_policy=duplicate_policy)

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def duplicate_policy(self) -> DuplicatePolicy:
        """Hydration policy for duplicate composite keys."""
        return self._duplicate_policy

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self._engine.dispose()

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def _acquire(self) -> Connection:
        try:
            return self._engine.connect()
        except DBAPIError as exc:
            msg = f"Backing store unreachable: {exc.orig}"
            raise ConnectivityError(msg) from exc

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """Atomic scope: commit on success, roll back on any other exit.

        Usage::

            with store.transaction() as txn:
                txn.conn.execute(insert(networks).values(...))
                txn.conn.execute(insert(nodes), node_rows)
                # Both commit together or not at all.
        """
        started = time.perf_counter()
        conn = self._acquire()
        try:
            try:
                trans = conn.begin()
            except DBAPIError as exc:
                msg = f"Cannot begin transaction: {exc.orig}"
                raise ConnectivityError(msg) from exc
            logger.debug("transaction.begin")

            try:
                with translate_errors():
                    yield StoreTransaction(conn=conn, store=self)
            except BaseException:
                trans.rollback()
                logger.debug(
                    "transaction.rollback",
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                )
                raise

            with translate_errors():
                trans.commit()
            logger.debug(
                "transaction.commit",
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        finally:
            conn.close()

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Non-transactional read scope; the connection is released on exit."""
        conn = self._acquire()
        try:
            with translate_errors():
                yield conn
        finally:
            conn.close()
