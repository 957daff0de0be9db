"""Split ratio set persistence."""

from __future__ import annotations

from scenariodb.domain.profiles import SplitRatioSet
from scenariodb.infrastructure.database.schema import (
    split_ratio_profiles,
    split_ratio_sets,
    split_ratios,
)
from scenariodb.infrastructure.repositories.profile_sets import ProfileSetRepository
from scenariodb.mapping.dehydrate import split_ratio_set_rows
from scenariodb.mapping.hydrate import split_ratio_set_from_rows


class SplitRatioSetRepository(ProfileSetRepository[SplitRatioSet]):
    """split_ratio_sets -> split_ratio_profiles -> split_ratios."""

    set_table = split_ratio_sets
    profile_table = split_ratio_profiles
    series_table = split_ratios
    set_column = "split_ratio_set_id"
    to_rows = staticmethod(split_ratio_set_rows)
    from_rows = staticmethod(split_ratio_set_from_rows)
