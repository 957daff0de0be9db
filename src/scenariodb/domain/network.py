"""Network graph model — Network, Node, Link.

A Network owns its nodes and links by value. Link endpoints are node ids
resolved against the owning network's node collection; there are no live
object references between entities, so a graph can be copied, hydrated, or
dehydrated without fixing up pointers.

INVARIANT: node ids are unique within a network, link ids are unique within
a network, and every link endpoint names a node in the same network before
the network is written. Self-loops (begin == end) are allowed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from scenariodb.domain.keys import from_key, optional_id, optional_key, to_key


@dataclass
class Node:
    """A network vertex."""

    id: int
    name: str | None = None
    type: str | None = None
    longitude: float | None = None
    latitude: float | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "id": to_key(self.id),
            "name": self.name,
            "type": self.type,
            "longitude": self.longitude,
            "latitude": self.latitude,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Node:
        return cls(
            id=from_key(str(doc["id"])),
            name=doc.get("name"),
            type=doc.get("type"),
            longitude=doc.get("longitude"),
            latitude=doc.get("latitude"),
        )


@dataclass
class Link:
    """A directed network edge between two nodes of the same network."""

    id: int
    begin_node_id: int
    end_node_id: int
    length: float | None = None
    speed_limit: float | None = None
    detail_level: int | None = None
    lane_count: float | None = None
    lane_offset: int | None = None
    name: str | None = None
    type: str | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "id": to_key(self.id),
            "begin": to_key(self.begin_node_id),
            "end": to_key(self.end_node_id),
            "length": self.length,
            "speedLimit": self.speed_limit,
            "detailLevel": self.detail_level,
            "laneCount": self.lane_count,
            "laneOffset": self.lane_offset,
            "name": self.name,
            "type": self.type,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Link:
        return cls(
            id=from_key(str(doc["id"])),
            begin_node_id=from_key(str(doc["begin"])),
            end_node_id=from_key(str(doc["end"])),
            length=doc.get("length"),
            speed_limit=doc.get("speedLimit"),
            detail_level=doc.get("detailLevel"),
            lane_count=doc.get("laneCount"),
            lane_offset=doc.get("laneOffset"),
            name=doc.get("name"),
            type=doc.get("type"),
        )


@dataclass
class Network:
    """A road network: ordered nodes and links plus descriptive metadata.

    ``id`` may be None for a network that has not been inserted yet; the
    writer allocates one and assigns it back on insert.
    """

    id: int | None = None
    name: str | None = None
    description: str | None = None
    project_id: int | None = None
    nodes: list[Node] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Collection management
    # ------------------------------------------------------------------

    def add_node(self, node: Node) -> Node:
        """Attach *node* to this network."""
        if self.node(node.id) is not None:
            msg = f"Network {self.id} already has a node with id {node.id}"
            raise ValueError(msg)
        self.nodes.append(node)
        return node

    def add_link(self, link_id: int, begin: Node, end: Node, **attrs: Any) -> Link:
        """Create a link between two attached nodes and attach it.

        The nodes are recorded by id; both must already belong to this network.
        """
        for endpoint in (begin, end):
            if self.node(endpoint.id) is not None:
                continue
            msg = f"Node {endpoint.id} is not attached to network {self.id}"
            raise ValueError(msg)
        if self.link(link_id) is not None:
            msg = f"Network {self.id} already has a link with id {link_id}"
            raise ValueError(msg)
        link = Link(id=link_id, begin_node_id=begin.id, end_node_id=end.id, **attrs)
        self.links.append(link)
        return link

    def node(self, node_id: int) -> Node | None:
        """Look up an attached node by id."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def link(self, link_id: int) -> Link | None:
        """Look up an attached link by id."""
        for link in self.links:
            if link.id == link_id:
                return link
        return None

    def begin_node(self, link: Link) -> Node | None:
        return self.node(link.begin_node_id)

    def end_node(self, link: Link) -> Node | None:
        return self.node(link.end_node_id)

    def unresolved_links(self) -> list[Link]:
        """Links with at least one endpoint missing from the node collection."""
        node_ids = {node.id for node in self.nodes}
        return [
            link
            for link in self.links
            if link.begin_node_id not in node_ids or link.end_node_id not in node_ids
        ]

    # ------------------------------------------------------------------
    # Canonical document
    # ------------------------------------------------------------------

    def to_document(self) -> dict[str, Any]:
        return {
            "id": optional_key(self.id),
            "name": self.name,
            "description": self.description,
            "projectId": optional_key(self.project_id),
            "nodes": [node.to_document() for node in self.nodes],
            "links": [link.to_document() for link in self.links],
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Network:
        return cls(
            id=optional_id(doc.get("id")),
            name=doc.get("name"),
            description=doc.get("description"),
            project_id=optional_id(doc.get("projectId")),
            nodes=[Node.from_document(n) for n in doc.get("nodes") or []],
            links=[Link.from_document(lk) for lk in doc.get("links") or []],
        )
