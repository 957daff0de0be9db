"""Entity kinds and mapping policies."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    """Top-level entity kinds addressable by surrogate id."""

    NETWORK = "network"
    DEMAND_SET = "demand-set"
    SPLIT_RATIO_SET = "split-ratio-set"
    FD_SET = "fd-set"
    SENSOR_SET = "sensor-set"
    SCENARIO = "scenario"


class DuplicatePolicy(StrEnum):
    """What hydration does when two rows share a full composite key."""

    LAST_WINS = "last_wins"
    ERROR = "error"
