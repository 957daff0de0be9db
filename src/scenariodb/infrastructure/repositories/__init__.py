"""Per-entity Reader/Writer repositories over a :class:`ScenarioStore`."""

from scenariodb.infrastructure.repositories.demand import DemandSetRepository
from scenariodb.infrastructure.repositories.fundamental import FDSetRepository
from scenariodb.infrastructure.repositories.links import LinkRepository
from scenariodb.infrastructure.repositories.network import NetworkRepository
from scenariodb.infrastructure.repositories.nodes import NodeRepository
from scenariodb.infrastructure.repositories.scenarios import ScenarioRepository
from scenariodb.infrastructure.repositories.sensor_sets import SensorSetRepository
from scenariodb.infrastructure.repositories.split_ratio import SplitRatioSetRepository

__all__ = [
    "DemandSetRepository",
    "FDSetRepository",
    "LinkRepository",
    "NetworkRepository",
    "NodeRepository",
    "ScenarioRepository",
    "SensorSetRepository",
    "SplitRatioSetRepository",
]
