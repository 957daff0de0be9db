"""Shared reader/writer for profile sets (set -> profiles -> series rows).

Demand, split-ratio, and fundamental-diagram sets differ only in their
tables and in how rows map to entities; subclasses bind those as class
attributes.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from sqlalchemy import delete, select, update

from scenariodb.domain.errors import NotFoundError
from scenariodb.domain.profiles import ProfileSet
from scenariodb.infrastructure.database.counters import next_id
from scenariodb.infrastructure.repositories.base import BaseRepository

if TYPE_CHECKING:
    from sqlalchemy import Column, Connection, Select, Table

    from scenariodb.infrastructure.store import StoreTransaction
    from scenariodb.mapping.dehydrate import SetRows

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=ProfileSet)


class ProfileSetRepository(BaseRepository, Generic[S]):
    """Composite reads and writes of one kind of profile set."""

    set_table: ClassVar[Table]
    profile_table: ClassVar[Table]
    series_table: ClassVar[Table]
    set_column: ClassVar[str]
    to_rows: ClassVar[Callable[[Any], SetRows]]
    from_rows: ClassVar[Callable[..., Any]]

    @property
    def _owner(self) -> Column[Any]:
        return self.profile_table.c[self.set_column]

    def read(self, set_id: int, *, txn: StoreTransaction | None = None) -> S | None:
        """Hydrate the set with every profile and series, or return None."""
        policy = self._duplicate_policy(txn)
        with self._read_scope(txn) as conn:
            set_row = (
                conn.execute(select(self.set_table).where(self.set_table.c.id == set_id))
                .mappings()
                .first()
            )
            if set_row is None:
                return None
            profile_rows = (
                conn.execute(
                    select(self.profile_table)
                    .where(self._owner == set_id)
                    .order_by(self.profile_table.c.profile_key)
                )
                .mappings()
                .all()
            )
            series_rows = (
                conn.execute(
                    select(self.series_table).where(
                        self.series_table.c.profile_id.in_(self._profile_ids(set_id))
                    )
                )
                .mappings()
                .all()
            )
        return self.from_rows(set_row, profile_rows, series_rows, on_duplicate=policy)

    def insert(self, profile_set: S, *, txn: StoreTransaction | None = None) -> int:
        """Insert the set, its profiles, and all series rows; returns its id.

        A set without an id gets one allocated; the id is assigned back to
        *profile_set* once the rows are written.

        Raises:
            ConstraintError: If the id is already taken.
        """
        with self._scope(txn) as t:
            set_id = profile_set.id
            if set_id is None:
                set_id = next_id(t.conn, self.set_table.name)
            rows = self.to_rows(dataclasses.replace(profile_set, id=set_id))
            t.conn.execute(self.set_table.insert().values(rows.set))
            self._write_profiles(t.conn, rows)
        profile_set.id = set_id
        logger.debug(
            "Inserted %s %s (%d profiles, %d series rows)",
            self.set_table.name,
            set_id,
            len(rows.profiles),
            rows.series_count,
        )
        return set_id

    def update(self, profile_set: S, *, txn: StoreTransaction | None = None) -> None:
        """Replace the scalar fields and every profile of an existing set.

        Raises:
            NotFoundError: If no set has this id.
        """
        if profile_set.id is None:
            msg = f"{type(profile_set).__name__} has no id; only a stored set can be updated"
            raise NotFoundError(msg)
        rows = self.to_rows(profile_set)
        set_id = rows.set["id"]
        with self._scope(txn) as t:
            self._delete_children(t.conn, set_id)
            values = {k: v for k, v in rows.set.items() if k != "id"}
            result = t.conn.execute(
                update(self.set_table).where(self.set_table.c.id == set_id).values(values)
            )
            if result.rowcount == 0:
                msg = f"{type(profile_set).__name__} {set_id} not found"
                raise NotFoundError(msg)
            self._write_profiles(t.conn, rows)

    def delete(self, set_id: int, *, txn: StoreTransaction | None = None) -> None:
        """Delete series rows, profiles, then the set row. Missing ids are a no-op."""
        with self._scope(txn) as t:
            self._delete_children(t.conn, set_id)
            t.conn.execute(delete(self.set_table).where(self.set_table.c.id == set_id))

    # ------------------------------------------------------------------

    def _profile_ids(self, set_id: int) -> Select[Any]:
        return select(self.profile_table.c.id).where(self._owner == set_id)

    def _write_profiles(self, conn: Connection, rows: SetRows) -> None:
        for profile in rows.profiles:
            result = conn.execute(self.profile_table.insert().values(profile.profile))
            profile_id = result.inserted_primary_key[0]
            self._insert_many(
                conn,
                self.series_table,
                [{**row, "profile_id": profile_id} for row in profile.series],
            )

    def _delete_children(self, conn: Connection, set_id: int) -> None:
        conn.execute(
            delete(self.series_table).where(
                self.series_table.c.profile_id.in_(self._profile_ids(set_id))
            )
        )
        conn.execute(delete(self.profile_table).where(self._owner == set_id))
