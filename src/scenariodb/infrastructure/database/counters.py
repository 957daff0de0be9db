"""Id allocation for top-level entities inserted without an id.

Uses the ``id_counters`` table. The allocated id is never lower than one past
the largest id already present, so ids supplied explicitly by callers and
allocated ids do not collide.

The caller owns the transaction: pass a ``Connection`` obtained from
``engine.begin()`` so the counter increment participates in the same
atomic transaction as the insert that consumes the id. The counter row is
read ``FOR UPDATE``, so concurrent allocators on a server database queue on
the row lock instead of reading the same value. SQLite has no row locks and
serialises writers on the database lock instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select, update

from scenariodb.infrastructure.database.schema import (
    demand_sets,
    fd_sets,
    id_counters,
    networks,
    scenarios,
    sensor_sets,
    split_ratio_sets,
)

if TYPE_CHECKING:
    from sqlalchemy import Connection, Select, Table

_COUNTED_TABLES: dict[str, Table] = {
    "networks": networks,
    "demand_sets": demand_sets,
    "split_ratio_sets": split_ratio_sets,
    "fd_sets": fd_sets,
    "sensor_sets": sensor_sets,
    "scenarios": scenarios,
}

COUNTED_ENTITIES: tuple[str, ...] = tuple(_COUNTED_TABLES)


def counter_query(entity: str) -> Select[tuple[int]]:
    """Locking read of the counter row for *entity*."""
    return (
        select(id_counters.c.next_value)
        .where(id_counters.c.entity == entity)
        .with_for_update()
    )


def next_id(conn: Connection, entity: str) -> int:
    """Claim the next free id for *entity* (a table name).

    Args:
        conn: Active SQLAlchemy connection (caller owns the transaction).
        entity: One of :data:`COUNTED_ENTITIES`.

    Returns:
        The allocated id.

    Raises:
        ValueError: If *entity* is not a counted table.
    """
    table = _COUNTED_TABLES.get(entity)
    if table is None:
        msg = f"Unknown counted entity: {entity!r}. Expected one of {sorted(_COUNTED_TABLES)}"
        raise ValueError(msg)

    row = conn.execute(counter_query(entity)).first()
    counter_value = 1 if row is None else int(row.next_value)

    max_id = conn.execute(select(func.max(table.c.id))).scalar_one()
    current_value = max(counter_value, 1 if max_id is None else int(max_id) + 1)

    if row is None:
        conn.execute(id_counters.insert().values(entity=entity, next_value=current_value + 1))
    else:
        conn.execute(
            update(id_counters)
            .where(id_counters.c.entity == entity)
            .values(next_value=current_value + 1)
        )

    return current_value
