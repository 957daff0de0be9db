"""Configuration: pydantic settings, TOML lookup, and logging setup."""
