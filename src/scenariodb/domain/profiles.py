"""Profile sets: time-indexed demand, split-ratio, and fundamental-diagram data.

Each set maps an opaque profile key to one profile. Profiles hold nested maps
whose leaves are time series: position ``i`` is the sample at time index
``i``. A series may be sparse; absent samples are ``None`` and are not
written to the store. Documents show series in the form the store keeps
them: trailing ``None`` samples are trimmed and series left empty are dropped
with their key, so a profile and its stored copy render the same document.

Nested map shapes (every key is a canonical key string):

- ``DemandProfile.flow``:        link -> series[float]
- ``SplitRatioProfile.ratio``:   link-in -> link-out -> vehicle-type -> series[float]
- ``FDProfile.fd``:              series[FundamentalDiagram]
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar

from scenariodb.domain.keys import normalize_key, optional_id, optional_key

Series = list[float | None]
FlowMap = dict[str, Series]
RatioMap = dict[str, dict[str, dict[str, Series]]]


def _sample_at(series: list[Any] | None, t: int) -> Any:
    if series is None or t < 0 or t >= len(series):
        return None
    return series[t]


def _trimmed(series: list[Any]) -> list[Any]:
    end = len(series)
    while end and series[end - 1] is None:
        end -= 1
    return list(series[:end])


def _pruned(tree: dict[str, Any]) -> dict[str, Any]:
    """Copy of a nested series map without empty series or empty branches."""
    pruned: dict[str, Any] = {}
    for key, child in tree.items():
        kept = _pruned(child) if isinstance(child, dict) else _trimmed(child)
        if kept:
            pruned[key] = kept
    return pruned


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


@dataclass
class DemandProfile:
    """Demand flow series per link, plus sampling and noise parameters."""

    destination_network_id: int | None = None
    start_time: float | None = None
    sample_rate: float | None = None
    knob: float | None = None
    std_dev_add: float | None = None
    std_dev_mult: float | None = None
    flow: FlowMap = field(default_factory=dict)

    def add_flow(self, link_id: int | str, value: float) -> None:
        """Append *value* to the flow series of *link_id*."""
        self.flow.setdefault(normalize_key(link_id), []).append(value)

    def flow_at(self, link_id: int | str, t: int) -> float | None:
        return _sample_at(self.flow.get(normalize_key(link_id)), t)

    def to_document(self) -> dict[str, Any]:
        return {
            "destinationNetworkId": optional_key(self.destination_network_id),
            "startTime": self.start_time,
            "sampleRate": self.sample_rate,
            "knob": self.knob,
            "stdDevAdd": self.std_dev_add,
            "stdDevMult": self.std_dev_mult,
            "flow": _pruned(self.flow),
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> DemandProfile:
        return cls(
            destination_network_id=optional_id(doc.get("destinationNetworkId")),
            start_time=doc.get("startTime"),
            sample_rate=doc.get("sampleRate"),
            knob=doc.get("knob"),
            std_dev_add=doc.get("stdDevAdd"),
            std_dev_mult=doc.get("stdDevMult"),
            flow={
                normalize_key(key): list(series) for key, series in (doc.get("flow") or {}).items()
            },
        )


@dataclass
class SplitRatioProfile:
    """Turning ratios per (link-in, link-out, vehicle-type) over time."""

    destination_network_id: int | None = None
    start_time: float | None = None
    sample_rate: float | None = None
    ratio: RatioMap = field(default_factory=dict)

    def add_ratio(
        self,
        link_in: int | str,
        link_out: int | str,
        vehicle_type: int | str,
        value: float,
    ) -> None:
        """Append *value* to the series at (link_in, link_out, vehicle_type).

        Successive calls for the same composite key extend one series; they
        never overwrite it.
        """
        by_out = self.ratio.setdefault(normalize_key(link_in), {})
        by_type = by_out.setdefault(normalize_key(link_out), {})
        by_type.setdefault(normalize_key(vehicle_type), []).append(value)

    def ratio_at(
        self,
        link_in: int | str,
        link_out: int | str,
        vehicle_type: int | str,
        t: int,
    ) -> float | None:
        series = (
            self.ratio.get(normalize_key(link_in), {})
            .get(normalize_key(link_out), {})
            .get(normalize_key(vehicle_type))
        )
        return _sample_at(series, t)

    def to_document(self) -> dict[str, Any]:
        return {
            "destinationNetworkId": optional_key(self.destination_network_id),
            "startTime": self.start_time,
            "sampleRate": self.sample_rate,
            "ratio": _pruned(self.ratio),
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> SplitRatioProfile:
        profile = cls(
            destination_network_id=optional_id(doc.get("destinationNetworkId")),
            start_time=doc.get("startTime"),
            sample_rate=doc.get("sampleRate"),
        )
        for link_in, by_out in (doc.get("ratio") or {}).items():
            for link_out, by_type in by_out.items():
                for vtype, series in by_type.items():
                    for value in series:
                        profile.add_ratio(link_in, link_out, vtype, value)
        return profile


@dataclass
class FundamentalDiagram:
    """Flow-density relationship of a link for one time step."""

    free_flow_speed: float | None = None
    critical_speed: float | None = None
    congestion_wave_speed: float | None = None
    capacity: float | None = None
    jam_density: float | None = None
    capacity_drop: float | None = None
    free_flow_speed_std: float | None = None
    congestion_wave_speed_std: float | None = None
    capacity_std: float | None = None

    _DOCUMENT_KEYS: ClassVar[dict[str, str]] = {
        "free_flow_speed": "freeFlowSpeed",
        "critical_speed": "criticalSpeed",
        "congestion_wave_speed": "congestionWaveSpeed",
        "capacity": "capacity",
        "jam_density": "jamDensity",
        "capacity_drop": "capacityDrop",
        "free_flow_speed_std": "freeFlowSpeedStd",
        "congestion_wave_speed_std": "congestionWaveSpeedStd",
        "capacity_std": "capacityStd",
    }

    def to_document(self) -> dict[str, Any]:
        return {self._DOCUMENT_KEYS[name]: value for name, value in asdict(self).items()}

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> FundamentalDiagram:
        return cls(**{name: doc.get(key) for name, key in cls._DOCUMENT_KEYS.items()})


@dataclass
class FDProfile:
    """Fundamental diagrams of one link over time."""

    start_time: float | None = None
    sample_rate: float | None = None
    fd: list[FundamentalDiagram | None] = field(default_factory=list)

    def add_fd(self, diagram: FundamentalDiagram) -> None:
        self.fd.append(diagram)

    def fd_at(self, t: int) -> FundamentalDiagram | None:
        return _sample_at(self.fd, t)

    def to_document(self) -> dict[str, Any]:
        return {
            "startTime": self.start_time,
            "sampleRate": self.sample_rate,
            "fd": [None if d is None else d.to_document() for d in _trimmed(self.fd)],
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> FDProfile:
        return cls(
            start_time=doc.get("startTime"),
            sample_rate=doc.get("sampleRate"),
            fd=[
                None if d is None else FundamentalDiagram.from_document(d)
                for d in doc.get("fd") or []
            ],
        )


# ---------------------------------------------------------------------------
# Sets
# ---------------------------------------------------------------------------


@dataclass
class ProfileSet:
    """Common shape of DemandSet, SplitRatioSet, and FDSet.

    ``profile`` maps a canonical profile key to a profile. The key is an
    opaque slot identifier, not a foreign key.
    """

    profile_type: ClassVar[type[Any]]

    id: int | None = None
    name: str | None = None
    description: str | None = None
    project_id: int | None = None
    profile: dict[str, Any] = field(default_factory=dict)

    def add_profile(self, key: int | str, profile: Any) -> Any:
        """Place *profile* at *key*, replacing any profile already there."""
        self.profile[normalize_key(key)] = profile
        return profile

    def profile_at(self, key: int | str) -> Any:
        return self.profile.get(normalize_key(key))

    def to_document(self) -> dict[str, Any]:
        return {
            "id": optional_key(self.id),
            "name": self.name,
            "description": self.description,
            "projectId": optional_key(self.project_id),
            "profile": {key: prof.to_document() for key, prof in self.profile.items()},
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Any:
        profile_set = cls(
            id=optional_id(doc.get("id")),
            name=doc.get("name"),
            description=doc.get("description"),
            project_id=optional_id(doc.get("projectId")),
        )
        for key, prof_doc in (doc.get("profile") or {}).items():
            profile_set.add_profile(key, cls.profile_type.from_document(prof_doc))
        return profile_set


@dataclass
class DemandSet(ProfileSet):
    profile_type: ClassVar[type[Any]] = DemandProfile

    profile: dict[str, DemandProfile] = field(default_factory=dict)


@dataclass
class SplitRatioSet(ProfileSet):
    profile_type: ClassVar[type[Any]] = SplitRatioProfile

    profile: dict[str, SplitRatioProfile] = field(default_factory=dict)


@dataclass
class FDSet(ProfileSet):
    """Fundamental-diagram set; ``type`` names the diagram family."""

    profile_type: ClassVar[type[Any]] = FDProfile

    profile: dict[str, FDProfile] = field(default_factory=dict)
    type: str | None = None

    def to_document(self) -> dict[str, Any]:
        doc = super().to_document()
        doc["type"] = self.type
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> FDSet:
        fd_set: FDSet = super().from_document(doc)
        fd_set.type = doc.get("type")
        return fd_set
