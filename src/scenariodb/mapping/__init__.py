"""Mapping layer — pure in-memory transforms between entity graphs and rows.

- :mod:`scenariodb.mapping.hydrate`: rows -> entities.
- :mod:`scenariodb.mapping.dehydrate`: entities -> rows.
"""
