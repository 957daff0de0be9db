"""Dehydration: entity graphs to per-table row batches.

Output rows hold only surrogate ids and scalar values; every key passes
through :func:`scenariodb.domain.keys.from_key`. Sequence positions become an
explicit ``time_index`` column. Absent samples (``None``) are omitted, so
sparse series round-trip through the store.

Link endpoints are resolved against the owning network's node collection
here, before any row is written.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from scenariodb.domain.errors import ReferenceResolutionError
from scenariodb.domain.keys import from_key
from scenariodb.domain.network import Link, Network, Node
from scenariodb.domain.profiles import (
    DemandProfile,
    DemandSet,
    FDProfile,
    FDSet,
    FundamentalDiagram,
    ProfileSet,
    SplitRatioProfile,
    SplitRatioSet,
)
from scenariodb.domain.scenario import Scenario
from scenariodb.domain.sensors import Sensor, SensorSet

Row = dict[str, Any]


@dataclass(frozen=True)
class NetworkRows:
    """Rows for one network, in insertion order."""

    network: Row
    nodes: list[Row] = field(default_factory=list)
    links: list[Row] = field(default_factory=list)


@dataclass(frozen=True)
class ProfileRows:
    """One profile row and its series rows.

    ``series`` rows lack ``profile_id``; the writer binds it once the
    profile row has been inserted and its id is known.
    """

    profile: Row
    series: list[Row] = field(default_factory=list)


@dataclass(frozen=True)
class SetRows:
    """Rows for one profile set, in insertion order."""

    set: Row
    profiles: list[ProfileRows] = field(default_factory=list)

    @property
    def series_count(self) -> int:
        return sum(len(p.series) for p in self.profiles)


@dataclass(frozen=True)
class SensorSetRows:
    set: Row
    sensors: list[Row] = field(default_factory=list)


@dataclass(frozen=True)
class ScenarioRows:
    """The scenario row plus one ``network_sets`` row per network."""

    scenario: Row
    network_sets: list[Row] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Networks
# ---------------------------------------------------------------------------


def node_rows(nodes: Iterable[Node], network_id: int, *, start: int = 0) -> list[Row]:
    return [
        {
            "network_id": network_id,
            "id": node.id,
            "name": node.name,
            "type": node.type,
            "longitude": node.longitude,
            "latitude": node.latitude,
            "position": position,
        }
        for position, node in enumerate(nodes, start)
    ]


def link_rows(
    links: Iterable[Link],
    network_id: int,
    *,
    node_ids: set[int] | None = None,
    start: int = 0,
) -> list[Row]:
    """Rows for *links*; when *node_ids* is given every endpoint must be in it.

    Each row records its list position, counted from *start*.

    Raises:
        ReferenceResolutionError: If an endpoint is not in *node_ids*.
    """
    rows: list[Row] = []
    for position, link in enumerate(links, start):
        if node_ids is not None:
            for endpoint in (link.begin_node_id, link.end_node_id):
                if endpoint not in node_ids:
                    msg = (
                        f"Link {link.id} references node {endpoint}, "
                        f"which is not in network {network_id}"
                    )
                    raise ReferenceResolutionError(msg)
        rows.append(
            {
                "network_id": network_id,
                "id": link.id,
                "begin_node_id": link.begin_node_id,
                "end_node_id": link.end_node_id,
                "length": link.length,
                "speed_limit": link.speed_limit,
                "detail_level": link.detail_level,
                "lane_count": link.lane_count,
                "lane_offset": link.lane_offset,
                "name": link.name,
                "type": link.type,
                "position": position,
            }
        )
    return rows


def network_row(network: Network) -> Row:
    return {
        "id": _require_id(network),
        "name": network.name,
        "description": network.description,
        "project_id": network.project_id,
    }


def network_rows(network: Network) -> NetworkRows:
    """Flatten a network into its own row plus node and link rows."""
    network_id = _require_id(network)
    return NetworkRows(
        network=network_row(network),
        nodes=node_rows(network.nodes, network_id),
        links=link_rows(network.links, network_id, node_ids={n.id for n in network.nodes}),
    )


# ---------------------------------------------------------------------------
# Series
# ---------------------------------------------------------------------------


def series_rows(
    mapping: Mapping[str, Any] | Sequence[Any],
    keys: Sequence[str],
    value: str | Callable[[Any], Row],
    *,
    index: str = "time_index",
) -> list[Row]:
    """Enumerate every (outer-key..., time-index) leaf of a nested series map.

    Args:
        mapping: Nested dicts ``len(keys)`` levels deep ending in sequences,
            or a bare sequence when *keys* is empty.
        keys: Column name for each nesting level, outermost first.
        value: Column name for scalar leaves, or a function turning a leaf
            into a dict of columns.
        index: Column receiving the sequence position.

    Returns:
        One row per non-None leaf value.
    """
    to_columns: Callable[[Any], Row]
    if isinstance(value, str):
        column = value

        def to_columns(leaf: Any) -> Row:
            return {column: leaf}

    else:
        to_columns = value

    rows: list[Row] = []

    def walk(node: Any, depth: int, prefix: Row) -> None:
        if depth == len(keys):
            for t, leaf in enumerate(node):
                if leaf is None:
                    continue
                rows.append({**prefix, index: t, **to_columns(leaf)})
            return
        for key, child in node.items():
            walk(child, depth + 1, {**prefix, keys[depth]: from_key(key)})

    walk(mapping, 0, {})
    return rows


# ---------------------------------------------------------------------------
# Profile sets
# ---------------------------------------------------------------------------


def _set_row(profile_set: ProfileSet) -> Row:
    return {
        "id": _require_id(profile_set),
        "name": profile_set.name,
        "description": profile_set.description,
        "project_id": profile_set.project_id,
    }


def _demand_profile_rows(key: str, profile: DemandProfile, set_id: int) -> ProfileRows:
    return ProfileRows(
        profile={
            "demand_set_id": set_id,
            "profile_key": from_key(key),
            "dest_network_id": profile.destination_network_id,
            "start_time": profile.start_time,
            "sample_rate": profile.sample_rate,
            "knob": profile.knob,
            "std_dev_add": profile.std_dev_add,
            "std_dev_mult": profile.std_dev_mult,
        },
        series=series_rows(profile.flow, ("link_id",), "flow"),
    )


def demand_set_rows(demand_set: DemandSet) -> SetRows:
    set_id = _require_id(demand_set)
    return SetRows(
        set=_set_row(demand_set),
        profiles=[
            _demand_profile_rows(key, profile, set_id)
            for key, profile in demand_set.profile.items()
        ],
    )


def _split_ratio_profile_rows(key: str, profile: SplitRatioProfile, set_id: int) -> ProfileRows:
    return ProfileRows(
        profile={
            "split_ratio_set_id": set_id,
            "profile_key": from_key(key),
            "dest_network_id": profile.destination_network_id,
            "start_time": profile.start_time,
            "sample_rate": profile.sample_rate,
        },
        series=series_rows(
            profile.ratio,
            ("in_link_id", "out_link_id", "vehicle_type_id"),
            "ratio",
        ),
    )


def split_ratio_set_rows(split_ratio_set: SplitRatioSet) -> SetRows:
    set_id = _require_id(split_ratio_set)
    return SetRows(
        set=_set_row(split_ratio_set),
        profiles=[
            _split_ratio_profile_rows(key, profile, set_id)
            for key, profile in split_ratio_set.profile.items()
        ],
    )


def _fd_columns(diagram: FundamentalDiagram) -> Row:
    return asdict(diagram)


def _fd_profile_rows(key: str, profile: FDProfile, set_id: int) -> ProfileRows:
    return ProfileRows(
        profile={
            "fd_set_id": set_id,
            "profile_key": from_key(key),
            "start_time": profile.start_time,
            "sample_rate": profile.sample_rate,
        },
        series=series_rows(profile.fd, (), _fd_columns),
    )


def fd_set_rows(fd_set: FDSet) -> SetRows:
    set_id = _require_id(fd_set)
    row = _set_row(fd_set)
    row["type"] = fd_set.type
    return SetRows(
        set=row,
        profiles=[_fd_profile_rows(key, profile, set_id) for key, profile in fd_set.profile.items()],
    )


# ---------------------------------------------------------------------------
# Sensor sets
# ---------------------------------------------------------------------------


def sensor_rows(
    sensors: Iterable[Sensor], sensor_set_id: int, *, start: int = 0
) -> list[Row]:
    return [
        {
            "sensor_set_id": sensor_set_id,
            "position": position,
            "entity_id": sensor.entity_id,
            "type": sensor.type,
            "data_feed_id": sensor.measurement_feed_id,
            "link_id": sensor.link_id,
            "link_offset": sensor.link_offset,
            "lane_num": sensor.lane_num,
            "health_status": sensor.health_status,
        }
        for position, sensor in enumerate(sensors, start)
    ]


def sensor_set_rows(sensor_set: SensorSet) -> SensorSetRows:
    set_id = _require_id(sensor_set)
    return SensorSetRows(
        set={
            "id": set_id,
            "name": sensor_set.name,
            "description": sensor_set.description,
            "project_id": sensor_set.project_id,
        },
        sensors=sensor_rows(sensor_set.sensors, set_id),
    )


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


def scenario_rows(scenario: Scenario) -> ScenarioRows:
    """Flatten a scenario into its row and its network associations.

    Associates are referenced by id, so each must already have one.

    Raises:
        ReferenceResolutionError: If the scenario or an associate has no id.
    """
    scenario_id = _require_id(scenario)
    demand_set = scenario.demand_set
    split_ratio_set = scenario.split_ratio_set
    return ScenarioRows(
        scenario={
            "id": scenario_id,
            "name": scenario.name,
            "description": scenario.description,
            "project_id": scenario.project_id,
            "demand_set_id": None if demand_set is None else _require_id(demand_set),
            "split_ratio_set_id": (
                None if split_ratio_set is None else _require_id(split_ratio_set)
            ),
        },
        network_sets=[
            {
                "scenario_id": scenario_id,
                "network_id": _require_id(network),
                "position": position,
            }
            for position, network in enumerate(scenario.networks)
        ],
    )


def _require_id(entity: Network | ProfileSet | SensorSet | Scenario) -> int:
    if entity.id is None:
        msg = f"{type(entity).__name__} has no id; it must be assigned before writing"
        raise ReferenceResolutionError(msg)
    return entity.id
