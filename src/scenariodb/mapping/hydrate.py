"""Hydration: flat relational rows to nested entity structures.

Series rows arrive in whatever order the store returns them. Each row
carries its full composite key (outer keys plus ``time_index``) and one
value; :func:`hydrate_series` groups rows by every key column except the
time index and places each value at its time position. The result is
independent of input row order.

Two rows with an identical full composite key are a data-quality problem.
Under :attr:`DuplicatePolicy.LAST_WINS` the last row applied wins and a
:class:`DataQualityWarning` is emitted; under :attr:`DuplicatePolicy.ERROR`
hydration raises :class:`DataQualityError`.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable, Iterable, Mapping, Sequence
from operator import itemgetter
from typing import Any

from scenariodb.domain.errors import DataQualityError, DataQualityWarning
from scenariodb.domain.keys import to_key
from scenariodb.domain.network import Link, Network, Node
from scenariodb.domain.profiles import (
    DemandProfile,
    DemandSet,
    FDProfile,
    FDSet,
    FundamentalDiagram,
    SplitRatioProfile,
    SplitRatioSet,
)
from scenariodb.domain.scenario import Scenario
from scenariodb.domain.sensors import Sensor, SensorSet
from scenariodb.domain.types import DuplicatePolicy

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]

_FD_COLUMNS: tuple[str, ...] = (
    "free_flow_speed",
    "critical_speed",
    "congestion_wave_speed",
    "capacity",
    "jam_density",
    "capacity_drop",
    "free_flow_speed_std",
    "congestion_wave_speed_std",
    "capacity_std",
)


# ---------------------------------------------------------------------------
# Series grouping
# ---------------------------------------------------------------------------


def _report_duplicate(key: tuple[int, ...], policy: DuplicatePolicy) -> None:
    msg = f"Duplicate composite key {key}; keeping the last value"
    if policy is DuplicatePolicy.ERROR:
        raise DataQualityError(f"Duplicate composite key {key}")
    logger.warning(msg)
    warnings.warn(msg, DataQualityWarning, stacklevel=4)


def hydrate_series(
    rows: Iterable[Row],
    keys: Sequence[str],
    index: str,
    value: Callable[[Row], Any],
    *,
    on_duplicate: DuplicatePolicy = DuplicatePolicy.LAST_WINS,
) -> Any:
    """Reassemble nested series from flat rows.

    Args:
        rows: Row mappings, in any order.
        keys: Outer key columns, outermost first. Each level of the result
            is a dict keyed by the canonical key of that column's value.
        index: Column holding the time index (0-based position).
        value: Extracts the leaf value from a row.
        on_duplicate: Policy for rows sharing a full composite key.

    Returns:
        A nested dict ``{key1: {key2: ... [v0, v1, ...]}}``, or the bare
        series when *keys* is empty. Series are sized ``max(index) + 1``
        with ``None`` at positions no row supplied.
    """
    groups: dict[tuple[int, ...], dict[int, Any]] = {}
    for row in rows:
        group_key = tuple(int(row[column]) for column in keys)
        t = int(row[index])
        if t < 0:
            msg = f"Negative time index {t} at composite key {group_key}"
            raise DataQualityError(msg)
        slots = groups.setdefault(group_key, {})
        if t in slots:
            _report_duplicate((*group_key, t), on_duplicate)
        slots[t] = value(row)

    if not keys:
        slots = groups.get((), {})
        return _to_series(slots)

    nested: dict[str, Any] = {}
    # Sorted so that dict iteration order does not depend on row order.
    for group_key, slots in sorted(groups.items()):
        target = nested
        for part in group_key[:-1]:
            target = target.setdefault(to_key(part), {})
        target[to_key(group_key[-1])] = _to_series(slots)
    return nested


def _to_series(slots: dict[int, Any]) -> list[Any]:
    if not slots:
        return []
    series: list[Any] = [None] * (max(slots) + 1)
    for t, v in slots.items():
        series[t] = v
    return series


# ---------------------------------------------------------------------------
# Networks
# ---------------------------------------------------------------------------


def node_from_row(row: Row) -> Node:
    return Node(
        id=int(row["id"]),
        name=row["name"],
        type=row["type"],
        longitude=row["longitude"],
        latitude=row["latitude"],
    )


def link_from_row(row: Row) -> Link:
    return Link(
        id=int(row["id"]),
        begin_node_id=int(row["begin_node_id"]),
        end_node_id=int(row["end_node_id"]),
        length=row["length"],
        speed_limit=row["speed_limit"],
        detail_level=row["detail_level"],
        lane_count=row["lane_count"],
        lane_offset=row["lane_offset"],
        name=row["name"],
        type=row["type"],
    )


def network_from_rows(
    network_row: Row | None,
    node_rows: Iterable[Row] = (),
    link_rows: Iterable[Row] = (),
) -> Network | None:
    """Build a Network from its own row plus node and link rows.

    Returns None when *network_row* is None (entity absent).
    """
    if network_row is None:
        return None
    return Network(
        id=int(network_row["id"]),
        name=network_row["name"],
        description=network_row["description"],
        project_id=_optional_int(network_row["project_id"]),
        nodes=[node_from_row(row) for row in node_rows],
        links=[link_from_row(row) for row in link_rows],
    )


# ---------------------------------------------------------------------------
# Profile sets
# ---------------------------------------------------------------------------


def demand_set_from_rows(
    set_row: Row | None,
    profile_rows: Iterable[Row] = (),
    demand_rows: Iterable[Row] = (),
    *,
    on_duplicate: DuplicatePolicy = DuplicatePolicy.LAST_WINS,
) -> DemandSet | None:
    """Build a DemandSet from its row, its profile rows, and all its demand rows."""
    if set_row is None:
        return None
    flows = hydrate_series(
        demand_rows,
        ("profile_id", "link_id"),
        "time_index",
        itemgetter("flow"),
        on_duplicate=on_duplicate,
    )
    demand_set = DemandSet(**_set_fields(set_row))
    for row in profile_rows:
        demand_set.add_profile(
            int(row["profile_key"]),
            DemandProfile(
                destination_network_id=_optional_int(row["dest_network_id"]),
                start_time=row["start_time"],
                sample_rate=row["sample_rate"],
                knob=row["knob"],
                std_dev_add=row["std_dev_add"],
                std_dev_mult=row["std_dev_mult"],
                flow=flows.get(to_key(int(row["id"])), {}),
            ),
        )
    return demand_set


def split_ratio_set_from_rows(
    set_row: Row | None,
    profile_rows: Iterable[Row] = (),
    ratio_rows: Iterable[Row] = (),
    *,
    on_duplicate: DuplicatePolicy = DuplicatePolicy.LAST_WINS,
) -> SplitRatioSet | None:
    """Build a SplitRatioSet from its row, its profile rows, and all its ratio rows."""
    if set_row is None:
        return None
    ratios = hydrate_series(
        ratio_rows,
        ("profile_id", "in_link_id", "out_link_id", "vehicle_type_id"),
        "time_index",
        itemgetter("ratio"),
        on_duplicate=on_duplicate,
    )
    split_ratio_set = SplitRatioSet(**_set_fields(set_row))
    for row in profile_rows:
        split_ratio_set.add_profile(
            int(row["profile_key"]),
            SplitRatioProfile(
                destination_network_id=_optional_int(row["dest_network_id"]),
                start_time=row["start_time"],
                sample_rate=row["sample_rate"],
                ratio=ratios.get(to_key(int(row["id"])), {}),
            ),
        )
    return split_ratio_set


def fundamental_diagram_from_row(row: Row) -> FundamentalDiagram:
    return FundamentalDiagram(**{column: row[column] for column in _FD_COLUMNS})


def fd_set_from_rows(
    set_row: Row | None,
    profile_rows: Iterable[Row] = (),
    diagram_rows: Iterable[Row] = (),
    *,
    on_duplicate: DuplicatePolicy = DuplicatePolicy.LAST_WINS,
) -> FDSet | None:
    """Build an FDSet from its row, its profile rows, and all its diagram rows."""
    if set_row is None:
        return None
    diagrams = hydrate_series(
        diagram_rows,
        ("profile_id",),
        "time_index",
        fundamental_diagram_from_row,
        on_duplicate=on_duplicate,
    )
    fd_set = FDSet(**_set_fields(set_row), type=set_row["type"])
    for row in profile_rows:
        fd_set.add_profile(
            int(row["profile_key"]),
            FDProfile(
                start_time=row["start_time"],
                sample_rate=row["sample_rate"],
                fd=diagrams.get(to_key(int(row["id"])), []),
            ),
        )
    return fd_set


# ---------------------------------------------------------------------------
# Sensor sets and scenarios
# ---------------------------------------------------------------------------


def sensor_from_row(row: Row) -> Sensor:
    return Sensor(
        entity_id=row["entity_id"],
        type=row["type"],
        measurement_feed_id=_optional_int(row["data_feed_id"]),
        link_id=_optional_int(row["link_id"]),
        link_offset=row["link_offset"],
        lane_num=row["lane_num"],
        health_status=row["health_status"],
    )


def sensor_set_from_rows(set_row: Row | None, sensor_rows: Iterable[Row] = ()) -> SensorSet | None:
    """Build a SensorSet; *sensor_rows* must already be in position order."""
    if set_row is None:
        return None
    return SensorSet(**_set_fields(set_row), sensors=[sensor_from_row(row) for row in sensor_rows])


def scenario_from_row(
    row: Row | None,
    *,
    networks: Iterable[Network] = (),
    demand_set: DemandSet | None = None,
    split_ratio_set: SplitRatioSet | None = None,
) -> Scenario | None:
    """Build a Scenario from its row and its already hydrated associates."""
    if row is None:
        return None
    return Scenario(
        **_set_fields(row),
        networks=list(networks),
        demand_set=demand_set,
        split_ratio_set=split_ratio_set,
    )


def _set_fields(row: Row) -> dict[str, Any]:
    return {
        "id": int(row["id"]),
        "name": row["name"],
        "description": row["description"],
        "project_id": _optional_int(row["project_id"]),
    }


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)
