"""Tests for ScenarioStore transaction scoping and error translation."""

from pathlib import Path

import pytest
from sqlalchemy import func, select, text

from scenariodb.config.settings import ScenarioDbSettings
from scenariodb.domain.errors import ConnectivityError, ConstraintError, StoreError
from scenariodb.domain.types import DuplicatePolicy
from scenariodb.infrastructure.database import create_db_engine, networks
from scenariodb.infrastructure.store import ScenarioStore


def _network_count(store: ScenarioStore) -> int:
    with store.connect() as conn:
        return conn.execute(select(func.count()).select_from(networks)).scalar_one()


class TestTransaction:
    def test_commit_on_success(self, store: ScenarioStore) -> None:
        with store.transaction() as txn:
            txn.conn.execute(networks.insert().values(id=1, name="a"))
        assert _network_count(store) == 1

    def test_rollback_on_exception(self, store: ScenarioStore) -> None:
        with pytest.raises(RuntimeError), store.transaction() as txn:
            txn.conn.execute(networks.insert().values(id=1))
            raise RuntimeError("boom")
        assert _network_count(store) == 0

    def test_rollback_on_keyboard_interrupt(self, store: ScenarioStore) -> None:
        with pytest.raises(KeyboardInterrupt), store.transaction() as txn:
            txn.conn.execute(networks.insert().values(id=1))
            raise KeyboardInterrupt
        assert _network_count(store) == 0

    def test_rollback_when_generator_abandoned(self, store: ScenarioStore) -> None:
        def writer():
            with store.transaction() as txn:
                txn.conn.execute(networks.insert().values(id=1))
                yield

        gen = writer()
        next(gen)
        gen.close()
        assert _network_count(store) == 0

    def test_integrity_error_translated(self, store: ScenarioStore) -> None:
        with pytest.raises(ConstraintError, match="Constraint violated"), store.transaction() as txn:
            txn.conn.execute(networks.insert().values(id=1))
            txn.conn.execute(networks.insert().values(id=1))
        assert _network_count(store) == 0

    def test_other_driver_errors_translated(self, store: ScenarioStore) -> None:
        with (
            pytest.raises(StoreError, match="no such table") as excinfo,
            store.transaction() as txn,
        ):
            txn.conn.execute(networks.insert().values(id=1))
            txn.conn.execute(text("SELECT * FROM missing_table"))
        assert excinfo.value.__cause__ is not None
        assert _network_count(store) == 0

    def test_read_scope_translates_driver_errors(self, store: ScenarioStore) -> None:
        with pytest.raises(StoreError), store.connect() as conn:
            conn.execute(text("SELEC 1"))

    def test_transaction_exposes_policy(self, db_url: str) -> None:
        store = ScenarioStore.from_url(db_url, duplicate_policy=DuplicatePolicy.ERROR)
        try:
            with store.transaction() as txn:
                assert txn.duplicate_policy is DuplicatePolicy.ERROR
        finally:
            store.close()


class TestConnectivity:
    def test_unreachable_database(self, tmp_path: Path) -> None:
        url = f"sqlite:///{tmp_path / 'missing' / 'dir' / 'x.db'}"
        with pytest.raises(ConnectivityError):
            ScenarioStore.from_url(url)

    def test_connect_failure_without_initialize(self, tmp_path: Path) -> None:
        engine = create_db_engine(f"sqlite:///{tmp_path / 'missing' / 'x.db'}")
        store = ScenarioStore(engine, initialize=False)
        try:
            with pytest.raises(ConnectivityError), store.transaction():
                pass
        finally:
            store.close()


class TestFromSettings:
    def test_uses_database_and_hydration_sections(self, db_url: str) -> None:
        settings = ScenarioDbSettings(
            database={"url": db_url, "pool_pre_ping": False},
            hydration={"on_duplicate": "error"},
        )
        store = ScenarioStore.from_settings(settings)
        try:
            assert str(store.engine.url) == db_url
            assert store.duplicate_policy is DuplicatePolicy.ERROR
        finally:
            store.close()
