"""Sensor set persistence: the set row plus its ordered sensor rows."""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, select, update

from scenariodb.domain.errors import NotFoundError
from scenariodb.infrastructure.database.counters import next_id
from scenariodb.infrastructure.database.schema import sensor_sets, sensors
from scenariodb.infrastructure.repositories.base import BaseRepository
from scenariodb.mapping.dehydrate import sensor_set_rows
from scenariodb.mapping.hydrate import sensor_set_from_rows

if TYPE_CHECKING:
    from sqlalchemy import Connection

    from scenariodb.domain.sensors import SensorSet
    from scenariodb.infrastructure.store import StoreTransaction

logger = logging.getLogger(__name__)


class SensorSetRepository(BaseRepository):
    """sensor_sets -> sensors."""

    def read(self, set_id: int, *, txn: StoreTransaction | None = None) -> SensorSet | None:
        """Hydrate the set with its sensors in insertion order, or return None."""
        with self._read_scope(txn) as conn:
            set_row = (
                conn.execute(select(sensor_sets).where(sensor_sets.c.id == set_id))
                .mappings()
                .first()
            )
            if set_row is None:
                return None
            sensor_rows = (
                conn.execute(
                    select(sensors)
                    .where(sensors.c.sensor_set_id == set_id)
                    .order_by(sensors.c.position)
                )
                .mappings()
                .all()
            )
        return sensor_set_from_rows(set_row, sensor_rows)

    def insert(self, sensor_set: SensorSet, *, txn: StoreTransaction | None = None) -> int:
        """Insert the set and its sensors; returns its id.

        A set without an id gets one allocated; the id is assigned back to
        *sensor_set* once the rows are written.

        Raises:
            ConstraintError: If the id is already taken.
        """
        with self._scope(txn) as t:
            set_id = sensor_set.id
            if set_id is None:
                set_id = next_id(t.conn, "sensor_sets")
            rows = sensor_set_rows(dataclasses.replace(sensor_set, id=set_id))
            t.conn.execute(sensor_sets.insert().values(rows.set))
            self._insert_many(t.conn, sensors, rows.sensors)
        sensor_set.id = set_id
        logger.debug("Inserted sensor set %s (%d sensors)", set_id, len(rows.sensors))
        return set_id

    def update(self, sensor_set: SensorSet, *, txn: StoreTransaction | None = None) -> None:
        """Replace the scalar fields and the sensor list of an existing set.

        Raises:
            NotFoundError: If no set has this id.
        """
        if sensor_set.id is None:
            msg = "SensorSet has no id; only a stored set can be updated"
            raise NotFoundError(msg)
        rows = sensor_set_rows(sensor_set)
        with self._scope(txn) as t:
            self._delete_sensors(t.conn, sensor_set.id)
            values = {k: v for k, v in rows.set.items() if k != "id"}
            result = t.conn.execute(
                update(sensor_sets).where(sensor_sets.c.id == sensor_set.id).values(values)
            )
            if result.rowcount == 0:
                msg = f"SensorSet {sensor_set.id} not found"
                raise NotFoundError(msg)
            self._insert_many(t.conn, sensors, rows.sensors)

    def delete(self, set_id: int, *, txn: StoreTransaction | None = None) -> None:
        """Delete the sensors, then the set row. Missing ids are a no-op."""
        with self._scope(txn) as t:
            self._delete_sensors(t.conn, set_id)
            t.conn.execute(delete(sensor_sets).where(sensor_sets.c.id == set_id))

    @staticmethod
    def _delete_sensors(conn: Connection, set_id: int) -> None:
        conn.execute(delete(sensors).where(sensors.c.sensor_set_id == set_id))
