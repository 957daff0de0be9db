"""Shared plumbing for repositories: scope selection and bulk inserts."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select

from scenariodb.infrastructure.store import StoreTransaction, translate_errors

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from sqlalchemy import ColumnElement, Connection, Table

    from scenariodb.domain.types import DuplicatePolicy
    from scenariodb.infrastructure.store import ScenarioStore


class BaseRepository:
    """Base for all repositories.

    Every public operation takes an optional ``txn``. Without one, the
    operation opens and completes its own transaction. With one, it joins
    the caller's transaction inside a savepoint: a failed operation is
    undone on its own and the caller may still commit the rest.
    """

    def __init__(self, store: ScenarioStore) -> None:
        self._store = store

    @property
    def store(self) -> ScenarioStore:
        return self._store

    @contextmanager
    def _scope(self, txn: StoreTransaction | None) -> Iterator[StoreTransaction]:
        """Write scope: own transaction, or a savepoint in the caller's."""
        if txn is not None:
            with translate_errors(), txn.conn.begin_nested():
                yield txn
            return
        with self._store.transaction() as own:
            yield own

    @contextmanager
    def _read_scope(self, txn: StoreTransaction | None) -> Iterator[Connection]:
        """Plain connection unless the caller supplies a transaction."""
        if txn is not None:
            with translate_errors():
                yield txn.conn
            return
        with self._store.connect() as conn:
            yield conn

    def _duplicate_policy(self, txn: StoreTransaction | None) -> DuplicatePolicy:
        return (txn or self._store).duplicate_policy

    @staticmethod
    def _insert_many(conn: Connection, table: Table, rows: Sequence[dict[str, Any]]) -> None:
        # executemany with an empty list is an error on some drivers
        if rows:
            conn.execute(table.insert(), list(rows))

    @staticmethod
    def _next_position(conn: Connection, table: Table, *where: ColumnElement[bool]) -> int:
        """First free ``position`` among the rows of *table* matching *where*."""
        stmt = select(func.coalesce(func.max(table.c.position) + 1, 0)).where(*where)
        return int(conn.execute(stmt).scalar_one())
