"""Link collection access inside one network."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from sqlalchemy import delete, select, update

from scenariodb.domain.errors import NotFoundError
from scenariodb.infrastructure.database.schema import links, nodes
from scenariodb.infrastructure.repositories.base import BaseRepository
from scenariodb.mapping.dehydrate import link_rows
from scenariodb.mapping.hydrate import link_from_row

if TYPE_CHECKING:
    from sqlalchemy import Connection

    from scenariodb.domain.network import Link
    from scenariodb.infrastructure.store import StoreTransaction

_FIXED_COLUMNS = ("network_id", "id", "position")


class LinkRepository(BaseRepository):
    """Read and write links of a single network.

    Endpoints are resolved against the nodes already stored for the network,
    so a link naming a missing node raises ReferenceResolutionError before
    anything is written.
    """

    def read(self, link_id: int, network_id: int, *, txn: StoreTransaction | None = None) -> Link | None:
        stmt = select(links).where(links.c.network_id == network_id, links.c.id == link_id)
        with self._read_scope(txn) as conn:
            row = conn.execute(stmt).mappings().first()
        return None if row is None else link_from_row(row)

    def read_all(self, network_id: int, *, txn: StoreTransaction | None = None) -> list[Link]:
        """All links of *network_id* in insertion order."""
        stmt = (
            select(links)
            .where(links.c.network_id == network_id)
            .order_by(links.c.position, links.c.id)
        )
        with self._read_scope(txn) as conn:
            rows = conn.execute(stmt).mappings().all()
        return [link_from_row(row) for row in rows]

    def insert(self, link: Link, network_id: int, *, txn: StoreTransaction | None = None) -> None:
        self.insert_all([link], network_id, txn=txn)

    def insert_all(
        self,
        items: Iterable[Link],
        network_id: int,
        *,
        txn: StoreTransaction | None = None,
    ) -> None:
        """Append *items* after the links already stored for *network_id*."""
        items = list(items)
        with self._scope(txn) as t:
            rows = link_rows(
                items,
                network_id,
                node_ids=_stored_node_ids(t.conn, network_id),
                start=self._next_position(t.conn, links, links.c.network_id == network_id),
            )
            self._insert_many(t.conn, links, rows)

    def update(self, link: Link, network_id: int, *, txn: StoreTransaction | None = None) -> None:
        """Update the scalar fields and endpoints of an existing link.

        Raises:
            NotFoundError: If the network has no link with this id.
        """
        with self._scope(txn) as t:
            (row,) = link_rows([link], network_id, node_ids=_stored_node_ids(t.conn, network_id))
            stmt = (
                update(links)
                .where(links.c.network_id == network_id, links.c.id == link.id)
                .values({k: v for k, v in row.items() if k not in _FIXED_COLUMNS})
            )
            result = t.conn.execute(stmt)
            if result.rowcount == 0:
                msg = f"Link {link.id} not found in network {network_id}"
                raise NotFoundError(msg)

    def delete(self, link_id: int, network_id: int, *, txn: StoreTransaction | None = None) -> None:
        stmt = delete(links).where(links.c.network_id == network_id, links.c.id == link_id)
        with self._scope(txn) as t:
            t.conn.execute(stmt)

    def delete_all(self, network_id: int, *, txn: StoreTransaction | None = None) -> None:
        stmt = delete(links).where(links.c.network_id == network_id)
        with self._scope(txn) as t:
            t.conn.execute(stmt)


def _stored_node_ids(conn: Connection, network_id: int) -> set[int]:
    stmt = select(nodes.c.id).where(nodes.c.network_id == network_id)
    return {int(node_id) for node_id in conn.execute(stmt).scalars()}
