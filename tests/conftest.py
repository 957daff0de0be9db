"""Shared pytest fixtures for scenariodb tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from scenariodb.domain.network import Network, Node
from scenariodb.domain.profiles import (
    DemandProfile,
    DemandSet,
    FDProfile,
    FDSet,
    FundamentalDiagram,
    SplitRatioProfile,
    SplitRatioSet,
)
from scenariodb.domain.sensors import Sensor, SensorSet
from scenariodb.domain.types import DuplicatePolicy
from scenariodb.infrastructure.repositories import (
    DemandSetRepository,
    FDSetRepository,
    LinkRepository,
    NetworkRepository,
    NodeRepository,
    ScenarioRepository,
    SensorSetRepository,
    SplitRatioSetRepository,
)
from scenariodb.infrastructure.store import ScenarioStore


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'scenario.db'}"


@pytest.fixture
def store(db_url: str) -> Iterator[ScenarioStore]:
    """Store over an initialized temp SQLite file with foreign keys on."""
    s = ScenarioStore.from_url(db_url)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def strict_store(db_url: str) -> Iterator[ScenarioStore]:
    """Store whose hydration refuses duplicate composite keys."""
    s = ScenarioStore.from_url(db_url, duplicate_policy=DuplicatePolicy.ERROR)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def network_repo(store: ScenarioStore) -> NetworkRepository:
    return NetworkRepository(store)


@pytest.fixture
def node_repo(store: ScenarioStore) -> NodeRepository:
    return NodeRepository(store)


@pytest.fixture
def link_repo(store: ScenarioStore) -> LinkRepository:
    return LinkRepository(store)


@pytest.fixture
def demand_repo(store: ScenarioStore) -> DemandSetRepository:
    return DemandSetRepository(store)


@pytest.fixture
def split_ratio_repo(store: ScenarioStore) -> SplitRatioSetRepository:
    return SplitRatioSetRepository(store)


@pytest.fixture
def fd_repo(store: ScenarioStore) -> FDSetRepository:
    return FDSetRepository(store)


@pytest.fixture
def sensor_set_repo(store: ScenarioStore) -> SensorSetRepository:
    return SensorSetRepository(store)


@pytest.fixture
def scenario_repo(store: ScenarioStore) -> ScenarioRepository:
    return ScenarioRepository(store)


# ---------------------------------------------------------------------------
# Sample graphs
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_network() -> Network:
    """Three nodes, two chained links and a self-loop."""
    net = Network(id=1, name="corridor", description=None, project_id=3)
    a = net.add_node(Node(1, name="A", type="signal", longitude=-122.27, latitude=37.8))
    b = net.add_node(Node(2, name="B"))
    c = net.add_node(Node(3))
    net.add_link(10, a, b, length=120.5, speed_limit=13.4, detail_level=1, lane_count=2.0)
    net.add_link(11, b, c, length=80.0, name="Main St", type="street")
    net.add_link(12, c, c, lane_offset=1)
    return net


@pytest.fixture
def sample_demand_set() -> DemandSet:
    am = DemandProfile(
        destination_network_id=1,
        start_time=25200.0,
        sample_rate=300.0,
        knob=1.0,
        std_dev_add=None,
        std_dev_mult=0.1,
    )
    for value in (100.0, 120.0, 90.0):
        am.add_flow(10, value)
    am.add_flow(11, 50.0)

    pm = DemandProfile(start_time=57600.0, sample_rate=900.0)
    pm.add_flow(12, 7.5)

    demand_set = DemandSet(id=5, name="weekday", description="counts", project_id=3)
    demand_set.add_profile(1, am)
    demand_set.add_profile(2, pm)
    return demand_set


@pytest.fixture
def sample_split_ratio_set() -> SplitRatioSet:
    profile = SplitRatioProfile(destination_network_id=1, start_time=0.0, sample_rate=300.0)
    for value in (0.25, 0.5, 0.75):
        profile.add_ratio(10, 11, 1, value)
    profile.add_ratio(10, 12, 1, 0.75)
    profile.add_ratio(10, 11, 2, 1.0)

    split_ratio_set = SplitRatioSet(id=8, name="turns", description=None, project_id=None)
    split_ratio_set.add_profile(2, profile)
    return split_ratio_set


@pytest.fixture
def sample_fd_set() -> FDSet:
    profile = FDProfile(start_time=0.0, sample_rate=3600.0)
    profile.add_fd(
        FundamentalDiagram(
            free_flow_speed=26.8,
            critical_speed=22.0,
            congestion_wave_speed=5.4,
            capacity=0.55,
            jam_density=0.12,
        )
    )
    profile.add_fd(FundamentalDiagram(free_flow_speed=20.0, capacity_drop=0.05))

    fd_set = FDSet(id=4, name="freeway", description=None, project_id=3, type="triangular")
    fd_set.add_profile(10, profile)
    return fd_set


@pytest.fixture
def sample_sensor_set() -> SensorSet:
    sensor_set = SensorSet(id=6, name="loops", description="mainline", project_id=3)
    sensor_set.add_sensor(
        Sensor(
            entity_id="401211",
            type="loop",
            measurement_feed_id=2,
            link_id=11,
            link_offset=35.0,
            lane_num=1.0,
            health_status=1.0,
        )
    )
    sensor_set.add_sensor(Sensor(entity_id="401210", type="radar", link_id=10))
    return sensor_set
