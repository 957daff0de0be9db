"""scenariodb — relational persistence for traffic-network scenarios."""

__version__ = "0.1.0"
