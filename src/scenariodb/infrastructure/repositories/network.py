"""Network persistence: the network row plus its nodes and links."""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, select, update

from scenariodb.domain.errors import NotFoundError
from scenariodb.infrastructure.database.counters import next_id
from scenariodb.infrastructure.database.schema import links, networks, nodes
from scenariodb.infrastructure.repositories.base import BaseRepository
from scenariodb.mapping.dehydrate import network_rows
from scenariodb.mapping.hydrate import network_from_rows

if TYPE_CHECKING:
    from sqlalchemy import Connection

    from scenariodb.domain.network import Network
    from scenariodb.infrastructure.store import StoreTransaction

logger = logging.getLogger(__name__)


class NetworkRepository(BaseRepository):
    """Composite reads and writes of whole networks.

    Writes run network -> nodes -> links; deletes run in reverse.
    """

    def read(self, network_id: int, *, txn: StoreTransaction | None = None) -> Network | None:
        """Hydrate a network with nodes and links in insertion order, or None."""
        with self._read_scope(txn) as conn:
            network_row = (
                conn.execute(select(networks).where(networks.c.id == network_id)).mappings().first()
            )
            if network_row is None:
                return None
            node_rows = conn.execute(
                select(nodes)
                .where(nodes.c.network_id == network_id)
                .order_by(nodes.c.position, nodes.c.id)
            ).mappings()
            link_rows = conn.execute(
                select(links)
                .where(links.c.network_id == network_id)
                .order_by(links.c.position, links.c.id)
            ).mappings()
            return network_from_rows(network_row, node_rows.all(), link_rows.all())

    def insert(self, network: Network, *, txn: StoreTransaction | None = None) -> int:
        """Insert *network* with all nodes and links; returns its id.

        A network without an id gets one allocated; the id is assigned back
        to *network* once the rows are written.

        Raises:
            ReferenceResolutionError: If a link endpoint is not in the network.
            ConstraintError: If the id is already taken.
        """
        with self._scope(txn) as t:
            network_id = network.id
            if network_id is None:
                network_id = next_id(t.conn, "networks")
            self._write(t.conn, dataclasses.replace(network, id=network_id))
        network.id = network_id
        logger.debug("Inserted network %s", network_id)
        return network_id

    def update(self, network: Network, *, txn: StoreTransaction | None = None) -> None:
        """Replace the scalar fields and the node and link collections.

        Raises:
            NotFoundError: If no network has this id.
        """
        if network.id is None:
            msg = "Network has no id; only a stored network can be updated"
            raise NotFoundError(msg)
        rows = network_rows(network)
        with self._scope(txn) as t:
            conn = t.conn
            self._delete_children(conn, rows.network["id"])
            values = {k: v for k, v in rows.network.items() if k != "id"}
            result = conn.execute(
                update(networks).where(networks.c.id == rows.network["id"]).values(values)
            )
            if result.rowcount == 0:
                msg = f"Network {network.id} not found"
                raise NotFoundError(msg)
            self._insert_many(conn, nodes, rows.nodes)
            self._insert_many(conn, links, rows.links)

    def delete(self, network_id: int, *, txn: StoreTransaction | None = None) -> None:
        """Delete links, nodes, then the network row. Missing ids are a no-op."""
        with self._scope(txn) as t:
            self._delete_children(t.conn, network_id)
            t.conn.execute(delete(networks).where(networks.c.id == network_id))

    def _write(self, conn: Connection, network: Network) -> None:
        rows = network_rows(network)
        conn.execute(networks.insert().values(rows.network))
        self._insert_many(conn, nodes, rows.nodes)
        self._insert_many(conn, links, rows.links)

    @staticmethod
    def _delete_children(conn: Connection, network_id: int) -> None:
        conn.execute(delete(links).where(links.c.network_id == network_id))
        conn.execute(delete(nodes).where(nodes.c.network_id == network_id))
