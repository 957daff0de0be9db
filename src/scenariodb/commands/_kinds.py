"""Entity kind registry: which model and repository serve each CLI KIND."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import click

from scenariodb.domain.network import Network
from scenariodb.domain.profiles import DemandSet, FDSet, SplitRatioSet
from scenariodb.domain.scenario import Scenario
from scenariodb.domain.sensors import SensorSet
from scenariodb.domain.types import EntityKind
from scenariodb.infrastructure.repositories import (
    DemandSetRepository,
    FDSetRepository,
    NetworkRepository,
    ScenarioRepository,
    SensorSetRepository,
    SplitRatioSetRepository,
)


@dataclass(frozen=True)
class KindBinding:
    model: type[Any]
    repository: type[Any]


KINDS: dict[EntityKind, KindBinding] = {
    EntityKind.NETWORK: KindBinding(Network, NetworkRepository),
    EntityKind.DEMAND_SET: KindBinding(DemandSet, DemandSetRepository),
    EntityKind.SPLIT_RATIO_SET: KindBinding(SplitRatioSet, SplitRatioSetRepository),
    EntityKind.FD_SET: KindBinding(FDSet, FDSetRepository),
    EntityKind.SENSOR_SET: KindBinding(SensorSet, SensorSetRepository),
    EntityKind.SCENARIO: KindBinding(Scenario, ScenarioRepository),
}

kind_argument = click.argument(
    "kind",
    type=click.Choice([kind.value for kind in EntityKind], case_sensitive=False),
    callback=lambda _ctx, _param, value: EntityKind(value.lower()),
)
