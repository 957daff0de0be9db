"""Database engine setup.

SQLAlchemy Core (not ORM) is used: the mapping between entity graphs and
rows is explicit in :mod:`scenariodb.mapping`, so an identity map or unit of
work would only duplicate it.

SQLite connections get ``PRAGMA foreign_keys=ON`` so that dependency order
is enforced the same way a server database enforces it. The pysqlite driver
is also told to leave transaction control to SQLAlchemy, which emits its own
``BEGIN``; without that, savepoints do not nest inside a transaction.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine, event, insert, select
from sqlalchemy.engine import Engine, make_url

from scenariodb.infrastructure.database.counters import COUNTED_ENTITIES
from scenariodb.infrastructure.database.schema import id_counters, metadata


def create_db_engine(url: str, *, echo: bool = False, pool_pre_ping: bool = False) -> Engine:
    """Create an engine for *url*, enabling foreign keys and savepoints on SQLite."""
    engine = create_engine(url, echo=echo, pool_pre_ping=pool_pre_ping)

    if make_url(url).get_backend_name() == "sqlite":

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            dbapi_conn.isolation_level = None

        @event.listens_for(engine, "begin")
        def _begin_sqlite(conn: Any) -> None:
            conn.exec_driver_sql("BEGIN")

    return engine


def init_database(engine: Engine) -> Engine:
    """Create all tables and seed the id counters.

    Idempotent; safe to call on an existing database.

    Returns the engine ready for use.
    """
    metadata.create_all(engine)
    _seed_counters(engine)
    return engine


def _seed_counters(engine: Engine) -> None:
    """Insert an initial counter row for each top-level entity table."""
    with engine.begin() as conn:
        for entity in COUNTED_ENTITIES:
            row = conn.execute(
                select(id_counters.c.entity).where(id_counters.c.entity == entity)
            ).first()
            if row is None:
                conn.execute(insert(id_counters).values(entity=entity, next_value=1))
