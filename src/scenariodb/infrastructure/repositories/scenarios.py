"""Scenario persistence.

A scenario row references its demand and split-ratio sets by id, and
``network_sets`` lists its networks in order. Writes touch only those rows;
the associates are stored through their own repositories first. Reads
hydrate the associates as well, all inside one transaction.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, select, update

from scenariodb.domain.errors import NotFoundError
from scenariodb.infrastructure.database.counters import next_id
from scenariodb.infrastructure.database.schema import network_sets, scenarios
from scenariodb.infrastructure.repositories.base import BaseRepository
from scenariodb.infrastructure.repositories.demand import DemandSetRepository
from scenariodb.infrastructure.repositories.network import NetworkRepository
from scenariodb.infrastructure.repositories.split_ratio import SplitRatioSetRepository
from scenariodb.mapping.dehydrate import scenario_rows
from scenariodb.mapping.hydrate import scenario_from_row

if TYPE_CHECKING:
    from sqlalchemy import Connection

    from scenariodb.domain.network import Network
    from scenariodb.domain.scenario import Scenario
    from scenariodb.infrastructure.store import StoreTransaction

logger = logging.getLogger(__name__)


class ScenarioRepository(BaseRepository):
    """scenarios -> network_sets, with associates read through their repositories."""

    def read(self, scenario_id: int, *, txn: StoreTransaction | None = None) -> Scenario | None:
        """Hydrate the scenario with its networks and sets, or return None."""
        if txn is None:
            with self._store.transaction() as own:
                return self.read(scenario_id, txn=own)

        with self._read_scope(txn) as conn:
            row = (
                conn.execute(select(scenarios).where(scenarios.c.id == scenario_id))
                .mappings()
                .first()
            )
            if row is None:
                return None
            network_ids = self._network_ids(conn, scenario_id)

        networks: list[Network] = []
        network_repo = NetworkRepository(self._store)
        for network_id in network_ids:
            network = network_repo.read(network_id, txn=txn)
            if network is not None:
                networks.append(network)

        demand_set = None
        if row["demand_set_id"] is not None:
            demand_set = DemandSetRepository(self._store).read(int(row["demand_set_id"]), txn=txn)
        split_ratio_set = None
        if row["split_ratio_set_id"] is not None:
            split_ratio_set = SplitRatioSetRepository(self._store).read(
                int(row["split_ratio_set_id"]), txn=txn
            )
        return scenario_from_row(
            row,
            networks=networks,
            demand_set=demand_set,
            split_ratio_set=split_ratio_set,
        )

    def read_network_ids(
        self, scenario_id: int, *, txn: StoreTransaction | None = None
    ) -> list[int]:
        """Ids of the scenario's networks, in the order they were listed."""
        with self._read_scope(txn) as conn:
            return self._network_ids(conn, scenario_id)

    def insert(self, scenario: Scenario, *, txn: StoreTransaction | None = None) -> int:
        """Insert the scenario row and its network list; returns its id.

        A scenario without an id gets one allocated; the id is assigned back
        to *scenario* once the rows are written.

        Raises:
            ReferenceResolutionError: If an associate has no id.
            ConstraintError: If the id is taken or an associate is not stored.
        """
        with self._scope(txn) as t:
            scenario_id = scenario.id
            if scenario_id is None:
                scenario_id = next_id(t.conn, "scenarios")
            rows = scenario_rows(dataclasses.replace(scenario, id=scenario_id))
            t.conn.execute(scenarios.insert().values(rows.scenario))
            self._insert_many(t.conn, network_sets, rows.network_sets)
        scenario.id = scenario_id
        logger.debug("Inserted scenario %s (%d networks)", scenario_id, len(rows.network_sets))
        return scenario_id

    def update(self, scenario: Scenario, *, txn: StoreTransaction | None = None) -> None:
        """Replace the scalar fields, set references and network list.

        Raises:
            NotFoundError: If no scenario has this id.
        """
        if scenario.id is None:
            msg = "Scenario has no id; only a stored scenario can be updated"
            raise NotFoundError(msg)
        rows = scenario_rows(scenario)
        with self._scope(txn) as t:
            self._delete_network_sets(t.conn, scenario.id)
            values = {k: v for k, v in rows.scenario.items() if k != "id"}
            result = t.conn.execute(
                update(scenarios).where(scenarios.c.id == scenario.id).values(values)
            )
            if result.rowcount == 0:
                msg = f"Scenario {scenario.id} not found"
                raise NotFoundError(msg)
            self._insert_many(t.conn, network_sets, rows.network_sets)

    def delete(self, scenario_id: int, *, txn: StoreTransaction | None = None) -> None:
        """Delete the scenario and its network list; associates are kept."""
        with self._scope(txn) as t:
            self._delete_network_sets(t.conn, scenario_id)
            t.conn.execute(delete(scenarios).where(scenarios.c.id == scenario_id))

    @staticmethod
    def _network_ids(conn: Connection, scenario_id: int) -> list[int]:
        stmt = (
            select(network_sets.c.network_id)
            .where(network_sets.c.scenario_id == scenario_id)
            .order_by(network_sets.c.position)
        )
        return [int(network_id) for network_id in conn.execute(stmt).scalars()]

    @staticmethod
    def _delete_network_sets(conn: Connection, scenario_id: int) -> None:
        conn.execute(delete(network_sets).where(network_sets.c.scenario_id == scenario_id))
