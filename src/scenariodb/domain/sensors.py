"""Sensor sets: ordered lists of detectors placed on network links."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from scenariodb.domain.keys import optional_id, optional_key


@dataclass
class Sensor:
    """One detector. ``link_id`` names a link by id; it is not checked against a network."""

    entity_id: str | None = None
    type: str | None = None
    measurement_feed_id: int | None = None
    link_id: int | None = None
    link_offset: float | None = None
    lane_num: float | None = None
    health_status: float | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "entityId": self.entity_id,
            "type": self.type,
            "measurementFeedId": optional_key(self.measurement_feed_id),
            "linkId": optional_key(self.link_id),
            "linkOffset": self.link_offset,
            "laneNum": self.lane_num,
            "healthStatus": self.health_status,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Sensor:
        return cls(
            entity_id=doc.get("entityId"),
            type=doc.get("type"),
            measurement_feed_id=optional_id(doc.get("measurementFeedId")),
            link_id=optional_id(doc.get("linkId")),
            link_offset=doc.get("linkOffset"),
            lane_num=doc.get("laneNum"),
            health_status=doc.get("healthStatus"),
        )


@dataclass
class SensorSet:
    id: int | None = None
    name: str | None = None
    description: str | None = None
    project_id: int | None = None
    sensors: list[Sensor] = field(default_factory=list)

    def add_sensor(self, sensor: Sensor) -> Sensor:
        self.sensors.append(sensor)
        return sensor

    def to_document(self) -> dict[str, Any]:
        return {
            "id": optional_key(self.id),
            "name": self.name,
            "description": self.description,
            "projectId": optional_key(self.project_id),
            "sensors": [sensor.to_document() for sensor in self.sensors],
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> SensorSet:
        return cls(
            id=optional_id(doc.get("id")),
            name=doc.get("name"),
            description=doc.get("description"),
            project_id=optional_id(doc.get("projectId")),
            sensors=[Sensor.from_document(s) for s in doc.get("sensors") or []],
        )
