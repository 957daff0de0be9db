"""Error taxonomy for the persistence layer.

Every failure surfaced to callers is a :class:`ScenarioDbError` subclass so
that each category can be caught on its own. "Row absent" on a read is not
an error: readers return ``None`` instead.

Duplicate composite keys found while hydrating are recoverable by default and
reported through :class:`DataQualityWarning` rather than raised.
"""

from __future__ import annotations


class ScenarioDbError(Exception):
    """Base class for all scenariodb errors."""


class ConnectivityError(ScenarioDbError):
    """The backing store is unreachable or a transaction could not be started."""


class ConstraintError(ScenarioDbError):
    """A write violated a store constraint (duplicate id, missing foreign row)."""


class StoreError(ScenarioDbError):
    """The store rejected a statement for a reason no narrower category covers."""


class FormatError(ScenarioDbError, ValueError):
    """A key string is not a canonical decimal integer."""


class ReferenceResolutionError(ScenarioDbError):
    """An object reference could not be resolved to a persisted id."""


class NotFoundError(ScenarioDbError):
    """An update targeted an entity that has no row in the store."""


class DataQualityError(ScenarioDbError):
    """Hydrated rows are inconsistent and the active policy refuses to repair them."""


class DataQualityWarning(UserWarning):
    """Hydrated rows were inconsistent and were repaired (last value wins)."""
