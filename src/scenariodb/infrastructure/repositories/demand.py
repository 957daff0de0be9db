"""Demand set persistence."""

from __future__ import annotations

from scenariodb.domain.profiles import DemandSet
from scenariodb.infrastructure.database.schema import demand_profiles, demand_sets, demands
from scenariodb.infrastructure.repositories.profile_sets import ProfileSetRepository
from scenariodb.mapping.dehydrate import demand_set_rows
from scenariodb.mapping.hydrate import demand_set_from_rows


class DemandSetRepository(ProfileSetRepository[DemandSet]):
    """demand_sets -> demand_profiles -> demands."""

    set_table = demand_sets
    profile_table = demand_profiles
    series_table = demands
    set_column = "demand_set_id"
    to_rows = staticmethod(demand_set_rows)
    from_rows = staticmethod(demand_set_from_rows)
