"""Database engine, schema, and id counters via SQLAlchemy Core."""

from scenariodb.infrastructure.database.counters import COUNTED_ENTITIES, counter_query, next_id
from scenariodb.infrastructure.database.engine import create_db_engine, init_database
from scenariodb.infrastructure.database.schema import (
    demand_profiles,
    demand_sets,
    demands,
    fd_profiles,
    fd_sets,
    fundamental_diagrams,
    id_counters,
    links,
    metadata,
    network_sets,
    networks,
    nodes,
    scenarios,
    sensor_sets,
    sensors,
    split_ratio_profiles,
    split_ratio_sets,
    split_ratios,
)

__all__ = [
    "COUNTED_ENTITIES",
    "counter_query",
    "create_db_engine",
    "demand_profiles",
    "demand_sets",
    "demands",
    "fd_profiles",
    "fd_sets",
    "fundamental_diagrams",
    "id_counters",
    "init_database",
    "links",
    "metadata",
    "network_sets",
    "networks",
    "next_id",
    "nodes",
    "scenarios",
    "sensor_sets",
    "sensors",
    "split_ratio_profiles",
    "split_ratio_sets",
    "split_ratios",
]
