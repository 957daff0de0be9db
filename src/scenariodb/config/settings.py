"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``SCENARIODB_*`` prefix (``SCENARIODB_DATABASE__URL``)
  3. TOML file    — ``--config``, else ``$SCENARIODB_CONFIG``, else the
                    nearest ``scenariodb.toml`` at or above the working dir
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import os
import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from scenariodb.config.models import DatabaseConfig, HydrationConfig

CONFIG_FILENAME = "scenariodb.toml"
CONFIG_ENV_VAR = "SCENARIODB_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Nearest ``scenariodb.toml`` in *start* (default: cwd) or its parents."""
    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``scenariodb.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class ScenarioDbSettings(BaseSettings):
    """Unified settings for the scenariodb CLI and embedding applications.

    Attributes:
        config_path: The TOML file the settings were read from, if any.
        database: Connection settings for the backing store.
        hydration: Read-path policies.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "SCENARIODB_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    hydration: HydrationConfig = Field(default_factory=HydrationConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        db_url: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> ScenarioDbSettings:
        """Construct settings from a CLI invocation.

        An explicit file (*config_path*, else ``$SCENARIODB_CONFIG``) must
        exist; otherwise ``scenariodb.toml`` is looked up from *start*.
        ``--db-url`` overrides ``[database] url`` while keeping the other
        database options from lower layers.
        """
        toml_path: Path | None = None
        explicit = config_path or os.environ.get(CONFIG_ENV_VAR)
        if explicit:
            toml_path = Path(explicit)
            if not toml_path.is_file():
                msg = f"Config file not found: {explicit}"
                raise click.ClickException(msg)
        else:
            toml_path = find_config(start)

        _tls.toml_path = toml_path
        try:
            settings = cls(config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None

        if db_url:
            database = settings.database.model_copy(update={"url": db_url})
            settings = settings.model_copy(update={"database": database})
        return settings
