"""Scenario: a named bundle of networks plus the demand and split-ratio data
that drive them.

A scenario does not own its associates. They are stored on their own and the
scenario row records their ids, so one network or set can be shared by many
scenarios. Writing a scenario requires every associate to carry an id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from scenariodb.domain.keys import optional_id, optional_key
from scenariodb.domain.network import Network
from scenariodb.domain.profiles import DemandSet, SplitRatioSet


@dataclass
class Scenario:
    id: int | None = None
    name: str | None = None
    description: str | None = None
    project_id: int | None = None
    networks: list[Network] = field(default_factory=list)
    demand_set: DemandSet | None = None
    split_ratio_set: SplitRatioSet | None = None

    def add_network(self, network: Network) -> Network:
        self.networks.append(network)
        return network

    def to_document(self) -> dict[str, Any]:
        return {
            "id": optional_key(self.id),
            "name": self.name,
            "description": self.description,
            "projectId": optional_key(self.project_id),
            "networks": [network.to_document() for network in self.networks],
            "demandSet": None if self.demand_set is None else self.demand_set.to_document(),
            "splitRatioSet": (
                None if self.split_ratio_set is None else self.split_ratio_set.to_document()
            ),
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Scenario:
        demand_doc = doc.get("demandSet")
        split_doc = doc.get("splitRatioSet")
        return cls(
            id=optional_id(doc.get("id")),
            name=doc.get("name"),
            description=doc.get("description"),
            project_id=optional_id(doc.get("projectId")),
            networks=[Network.from_document(n) for n in doc.get("networks") or []],
            demand_set=None if demand_doc is None else DemandSet.from_document(demand_doc),
            split_ratio_set=None if split_doc is None else SplitRatioSet.from_document(split_doc),
        )
