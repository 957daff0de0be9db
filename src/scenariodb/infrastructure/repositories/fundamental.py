"""Fundamental diagram set persistence."""

from __future__ import annotations

from scenariodb.domain.profiles import FDSet
from scenariodb.infrastructure.database.schema import fd_profiles, fd_sets, fundamental_diagrams
from scenariodb.infrastructure.repositories.profile_sets import ProfileSetRepository
from scenariodb.mapping.dehydrate import fd_set_rows
from scenariodb.mapping.hydrate import fd_set_from_rows


class FDSetRepository(ProfileSetRepository[FDSet]):
    """fd_sets -> fd_profiles -> fundamental_diagrams."""

    set_table = fd_sets
    profile_table = fd_profiles
    series_table = fundamental_diagrams
    set_column = "fd_set_id"
    to_rows = staticmethod(fd_set_rows)
    from_rows = staticmethod(fd_set_from_rows)
