"""SQLAlchemy Core table definitions for the scenario database.

Three families of tables, each with a fixed dependency order:

- Network:      networks <- nodes <- links
- Profile sets: <kind>_sets <- <kind>_profiles <- series rows
- Sensors:      sensor_sets <- sensors
- Scenarios:    networks, demand_sets, split_ratio_sets <- scenarios <- network_sets
- Bookkeeping:  id_counters

Series tables carry the time position explicitly in ``time_index``; SQL
result sets have no inherent order, so hydration orders by that column
rather than by physical row order. Series tables use a surrogate ``id`` and
no uniqueness constraint on the composite key, matching stores where such
constraints are absent; hydration reports duplicates.
"""

from __future__ import annotations

from sqlalchemy import (
    REAL,
    BigInteger,
    Column,
    ForeignKey,
    ForeignKeyConstraint,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

# ---------------------------------------------------------------------------
# Networks
# ---------------------------------------------------------------------------

networks = Table(
    "networks",
    metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=False),
    Column("name", Text),
    Column("description", Text),
    Column("project_id", BigInteger),
)

nodes = Table(
    "nodes",
    metadata,
    Column("network_id", BigInteger, ForeignKey("networks.id"), primary_key=True),
    Column("id", BigInteger, primary_key=True, autoincrement=False),
    Column("name", Text),
    Column("type", Text),
    Column("longitude", REAL),
    Column("latitude", REAL),
    Column("position", Integer, nullable=False, server_default="0"),
)

links = Table(
    "links",
    metadata,
    Column("network_id", BigInteger, ForeignKey("networks.id"), primary_key=True),
    Column("id", BigInteger, primary_key=True, autoincrement=False),
    Column("begin_node_id", BigInteger, nullable=False),
    Column("end_node_id", BigInteger, nullable=False),
    Column("length", REAL),
    Column("speed_limit", REAL),
    Column("detail_level", Integer),
    Column("lane_count", REAL),
    Column("lane_offset", Integer),
    Column("name", Text),
    Column("type", Text),
    Column("position", Integer, nullable=False, server_default="0"),
    ForeignKeyConstraint(["network_id", "begin_node_id"], ["nodes.network_id", "nodes.id"]),
    ForeignKeyConstraint(["network_id", "end_node_id"], ["nodes.network_id", "nodes.id"]),
)

# ---------------------------------------------------------------------------
# Demand sets
# ---------------------------------------------------------------------------

demand_sets = Table(
    "demand_sets",
    metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=False),
    Column("name", Text),
    Column("description", Text),
    Column("project_id", BigInteger),
)

demand_profiles = Table(
    "demand_profiles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("demand_set_id", BigInteger, ForeignKey("demand_sets.id"), nullable=False),
    Column("profile_key", BigInteger, nullable=False),
    Column("dest_network_id", BigInteger),
    Column("start_time", REAL),
    Column("sample_rate", REAL),
    Column("knob", REAL),
    Column("std_dev_add", REAL),
    Column("std_dev_mult", REAL),
    UniqueConstraint("demand_set_id", "profile_key"),
)

demands = Table(
    "demands",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("profile_id", Integer, ForeignKey("demand_profiles.id"), nullable=False),
    Column("link_id", BigInteger, nullable=False),
    Column("time_index", Integer, nullable=False),
    Column("flow", REAL),
)

# ---------------------------------------------------------------------------
# Split ratio sets
# ---------------------------------------------------------------------------

split_ratio_sets = Table(
    "split_ratio_sets",
    metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=False),
    Column("name", Text),
    Column("description", Text),
    Column("project_id", BigInteger),
)

split_ratio_profiles = Table(
    "split_ratio_profiles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("split_ratio_set_id", BigInteger, ForeignKey("split_ratio_sets.id"), nullable=False),
    Column("profile_key", BigInteger, nullable=False),
    Column("dest_network_id", BigInteger),
    Column("start_time", REAL),
    Column("sample_rate", REAL),
    UniqueConstraint("split_ratio_set_id", "profile_key"),
)

split_ratios = Table(
    "split_ratios",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("profile_id", Integer, ForeignKey("split_ratio_profiles.id"), nullable=False),
    Column("in_link_id", BigInteger, nullable=False),
    Column("out_link_id", BigInteger, nullable=False),
    Column("vehicle_type_id", BigInteger, nullable=False),
    Column("time_index", Integer, nullable=False),
    Column("ratio", REAL),
)

# ---------------------------------------------------------------------------
# Fundamental diagram sets
# ---------------------------------------------------------------------------

fd_sets = Table(
    "fd_sets",
    metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=False),
    Column("name", Text),
    Column("description", Text),
    Column("type", Text),
    Column("project_id", BigInteger),
)

fd_profiles = Table(
    "fd_profiles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("fd_set_id", BigInteger, ForeignKey("fd_sets.id"), nullable=False),
    Column("profile_key", BigInteger, nullable=False),
    Column("start_time", REAL),
    Column("sample_rate", REAL),
    UniqueConstraint("fd_set_id", "profile_key"),
)

fundamental_diagrams = Table(
    "fundamental_diagrams",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("profile_id", Integer, ForeignKey("fd_profiles.id"), nullable=False),
    Column("time_index", Integer, nullable=False),
    Column("free_flow_speed", REAL),
    Column("critical_speed", REAL),
    Column("congestion_wave_speed", REAL),
    Column("capacity", REAL),
    Column("jam_density", REAL),
    Column("capacity_drop", REAL),
    Column("free_flow_speed_std", REAL),
    Column("congestion_wave_speed_std", REAL),
    Column("capacity_std", REAL),
)

# ---------------------------------------------------------------------------
# Sensor sets
# ---------------------------------------------------------------------------

sensor_sets = Table(
    "sensor_sets",
    metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=False),
    Column("name", Text),
    Column("description", Text),
    Column("project_id", BigInteger),
)

sensors = Table(
    "sensors",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("sensor_set_id", BigInteger, ForeignKey("sensor_sets.id"), nullable=False),
    Column("position", Integer, nullable=False),
    Column("entity_id", Text),
    Column("type", Text),
    Column("data_feed_id", BigInteger),
    Column("link_id", BigInteger),
    Column("link_offset", REAL),
    Column("lane_num", REAL),
    Column("health_status", REAL),
)

# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

scenarios = Table(
    "scenarios",
    metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=False),
    Column("name", Text),
    Column("description", Text),
    Column("project_id", BigInteger),
    Column("demand_set_id", BigInteger, ForeignKey("demand_sets.id")),
    Column("split_ratio_set_id", BigInteger, ForeignKey("split_ratio_sets.id")),
)

network_sets = Table(
    "network_sets",
    metadata,
    Column("scenario_id", BigInteger, ForeignKey("scenarios.id"), primary_key=True),
    Column("network_id", BigInteger, ForeignKey("networks.id"), primary_key=True),
    Column("position", Integer, nullable=False),
)

# ---------------------------------------------------------------------------
# Id allocation for top-level entities inserted without an id
# ---------------------------------------------------------------------------

id_counters = Table(
    "id_counters",
    metadata,
    Column("entity", Text, primary_key=True),
    Column("next_value", BigInteger, nullable=False, default=1, server_default="1"),
)

# ---------------------------------------------------------------------------
# Indexes for dependent-row lookups
# ---------------------------------------------------------------------------

Index("ix_demand_profiles_set", demand_profiles.c.demand_set_id)
Index("ix_demands_profile", demands.c.profile_id)
Index("ix_split_ratio_profiles_set", split_ratio_profiles.c.split_ratio_set_id)
Index("ix_split_ratios_profile", split_ratios.c.profile_id)
Index("ix_fd_profiles_set", fd_profiles.c.fd_set_id)
Index("ix_fundamental_diagrams_profile", fundamental_diagrams.c.profile_id)
Index("ix_sensors_set", sensors.c.sensor_set_id)
