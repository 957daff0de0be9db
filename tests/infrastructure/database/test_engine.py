"""Tests for engine creation and schema initialization."""

from pathlib import Path

import pytest
from sqlalchemy import func, inspect, select, text
from sqlalchemy.exc import IntegrityError

from scenariodb.infrastructure.database import (
    COUNTED_ENTITIES,
    create_db_engine,
    id_counters,
    init_database,
    links,
    networks,
)


@pytest.fixture
def engine(tmp_path: Path):
    eng = create_db_engine(f"sqlite:///{tmp_path / 'e.db'}")
    try:
        yield eng
    finally:
        eng.dispose()


class TestInitDatabase:
    def test_creates_all_tables(self, engine) -> None:
        init_database(engine)
        tables = set(inspect(engine).get_table_names())
        assert {
            "networks",
            "nodes",
            "links",
            "demand_sets",
            "demand_profiles",
            "demands",
            "split_ratio_sets",
            "split_ratio_profiles",
            "split_ratios",
            "fd_sets",
            "fd_profiles",
            "fundamental_diagrams",
            "sensor_sets",
            "sensors",
            "scenarios",
            "network_sets",
            "id_counters",
        } <= tables

    def test_seeds_counters(self, engine) -> None:
        init_database(engine)
        with engine.connect() as conn:
            entities = set(conn.execute(select(id_counters.c.entity)).scalars())
        assert entities == set(COUNTED_ENTITIES)

    def test_idempotent(self, engine) -> None:
        init_database(engine)
        init_database(engine)
        with engine.connect() as conn:
            count = len(conn.execute(select(id_counters)).all())
        assert count == len(COUNTED_ENTITIES)


class TestSqliteForeignKeys:
    def test_pragma_enabled(self, engine) -> None:
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar_one() == 1

    def test_link_requires_nodes(self, engine) -> None:
        init_database(engine)
        with pytest.raises(IntegrityError), engine.begin() as conn:
            conn.execute(networks.insert().values(id=1))
            conn.execute(links.insert().values(network_id=1, id=1, begin_node_id=1, end_node_id=2))

    def test_savepoint_rolls_back_alone(self, engine) -> None:
        init_database(engine)
        with engine.begin() as conn:
            conn.execute(networks.insert().values(id=1))
            with pytest.raises(IntegrityError), conn.begin_nested():
                conn.execute(networks.insert().values(id=2))
                conn.execute(networks.insert().values(id=1))
            conn.execute(networks.insert().values(id=3))
        with engine.connect() as conn:
            ids = conn.execute(select(networks.c.id).order_by(networks.c.id)).scalars().all()
            assert ids == [1, 3]
            assert conn.execute(select(func.count()).select_from(networks)).scalar_one() == 2
