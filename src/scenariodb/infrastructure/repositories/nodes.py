"""Node collection access inside one network."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from sqlalchemy import delete, select, update

from scenariodb.domain.errors import NotFoundError
from scenariodb.infrastructure.database.schema import nodes
from scenariodb.infrastructure.repositories.base import BaseRepository
from scenariodb.mapping.dehydrate import node_rows
from scenariodb.mapping.hydrate import node_from_row

if TYPE_CHECKING:
    from scenariodb.domain.network import Node
    from scenariodb.infrastructure.store import StoreTransaction

_FIXED_COLUMNS = ("network_id", "id", "position")


class NodeRepository(BaseRepository):
    """Read and write nodes of a single network."""

    def read(self, node_id: int, network_id: int, *, txn: StoreTransaction | None = None) -> Node | None:
        stmt = select(nodes).where(nodes.c.network_id == network_id, nodes.c.id == node_id)
        with self._read_scope(txn) as conn:
            row = conn.execute(stmt).mappings().first()
        return None if row is None else node_from_row(row)

    def read_all(self, network_id: int, *, txn: StoreTransaction | None = None) -> list[Node]:
        """All nodes of *network_id* in insertion order."""
        stmt = (
            select(nodes)
            .where(nodes.c.network_id == network_id)
            .order_by(nodes.c.position, nodes.c.id)
        )
        with self._read_scope(txn) as conn:
            rows = conn.execute(stmt).mappings().all()
        return [node_from_row(row) for row in rows]

    def insert(self, node: Node, network_id: int, *, txn: StoreTransaction | None = None) -> None:
        self.insert_all([node], network_id, txn=txn)

    def insert_all(
        self,
        items: Iterable[Node],
        network_id: int,
        *,
        txn: StoreTransaction | None = None,
    ) -> None:
        """Append *items* after the nodes already stored for *network_id*."""
        items = list(items)
        with self._scope(txn) as t:
            start = self._next_position(t.conn, nodes, nodes.c.network_id == network_id)
            self._insert_many(t.conn, nodes, node_rows(items, network_id, start=start))

    def update(self, node: Node, network_id: int, *, txn: StoreTransaction | None = None) -> None:
        """Update the scalar fields of an existing node.

        Raises:
            NotFoundError: If the network has no node with this id.
        """
        (row,) = node_rows([node], network_id)
        stmt = (
            update(nodes)
            .where(nodes.c.network_id == network_id, nodes.c.id == node.id)
            .values({k: v for k, v in row.items() if k not in _FIXED_COLUMNS})
        )
        with self._scope(txn) as t:
            result = t.conn.execute(stmt)
            if result.rowcount == 0:
                msg = f"Node {node.id} not found in network {network_id}"
                raise NotFoundError(msg)

    def delete(self, node_id: int, network_id: int, *, txn: StoreTransaction | None = None) -> None:
        """Delete one node. Fails with ConstraintError while links still use it."""
        stmt = delete(nodes).where(nodes.c.network_id == network_id, nodes.c.id == node_id)
        with self._scope(txn) as t:
            t.conn.execute(stmt)

    def delete_all(self, network_id: int, *, txn: StoreTransaction | None = None) -> None:
        stmt = delete(nodes).where(nodes.c.network_id == network_id)
        with self._scope(txn) as t:
            t.conn.execute(stmt)
