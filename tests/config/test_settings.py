"""Tests for ScenarioDbSettings: unified settings with TOML source."""

from pathlib import Path

import click
import pytest

from scenariodb.config.settings import CONFIG_ENV_VAR, ScenarioDbSettings, find_config
from scenariodb.domain.types import DuplicatePolicy


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SCENARIODB_CONFIG", "SCENARIODB_DATABASE__URL", "SCENARIODB_HYDRATION__ON_DUPLICATE"):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = ScenarioDbSettings.from_cli(start=tmp_path)
        assert settings.config_path is None
        assert settings.database.url == "sqlite:///scenario.db"
        assert settings.database.echo is False
        assert settings.database.pool_pre_ping is True
        assert settings.hydration.on_duplicate is DuplicatePolicy.LAST_WINS
        assert settings.verbose is False

    def test_frozen(self, tmp_path: Path) -> None:
        settings = ScenarioDbSettings.from_cli(start=tmp_path)
        with pytest.raises(Exception):
            settings.verbose = True  # type: ignore[misc]


class TestFindConfig:
    def test_not_found(self, tmp_path: Path) -> None:
        assert find_config(tmp_path) is None

    def test_found_in_parent(self, tmp_path: Path) -> None:
        (tmp_path / "scenariodb.toml").write_text("")
        child = tmp_path / "child"
        child.mkdir()
        assert find_config(child) == (tmp_path / "scenariodb.toml").resolve()

    def test_nearest_file_wins(self, tmp_path: Path) -> None:
        (tmp_path / "scenariodb.toml").write_text("")
        child = tmp_path / "child"
        child.mkdir()
        (child / "scenariodb.toml").write_text("")
        assert find_config(child) == (child / "scenariodb.toml").resolve()


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "scenariodb.toml").write_text(
            '[database]\nurl = "sqlite:///other.db"\n[hydration]\non_duplicate = "error"\n'
        )
        settings = ScenarioDbSettings.from_cli(start=tmp_path)
        assert settings.database.url == "sqlite:///other.db"
        assert settings.database.pool_pre_ping is True
        assert settings.hydration.on_duplicate is DuplicatePolicy.ERROR
        assert settings.config_path is not None
        assert settings.config_path.resolve() == (tmp_path / "scenariodb.toml").resolve()

    def test_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / "scenariodb.toml").write_text("[database]\necho = true\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert ScenarioDbSettings.from_cli(start=nested).database.echo is True

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom.toml"
        custom.write_text('[database]\nurl = "sqlite:///custom.db"\n')
        settings = ScenarioDbSettings.from_cli(config_path=str(custom))
        assert settings.database.url == "sqlite:///custom.db"

    def test_missing_explicit_config(self, tmp_path: Path) -> None:
        with pytest.raises(click.ClickException, match="not found"):
            ScenarioDbSettings.from_cli(config_path=str(tmp_path / "nope.toml"))

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "scenariodb.toml").write_text("[database\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            ScenarioDbSettings.from_cli(start=tmp_path)

    def test_config_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        elsewhere = tmp_path / "elsewhere.toml"
        elsewhere.write_text('[database]\nurl = "sqlite:///env.db"\n')
        monkeypatch.setenv("SCENARIODB_CONFIG", str(elsewhere))
        assert ScenarioDbSettings.from_cli(start=tmp_path).database.url == "sqlite:///env.db"

    def test_config_env_var_to_missing_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "scenariodb.toml").write_text("[database]\necho = true\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "absent.toml"))
        with pytest.raises(click.ClickException, match="not found"):
            ScenarioDbSettings.from_cli(start=tmp_path)

    def test_config_flag_beats_env_var(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        flag = tmp_path / "flag.toml"
        flag.write_text('[database]\nurl = "sqlite:///flag.db"\n')
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "absent.toml"))
        settings = ScenarioDbSettings.from_cli(config_path=str(flag))
        assert settings.database.url == "sqlite:///flag.db"


class TestPriority:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "scenariodb.toml").write_text('[database]\nurl = "sqlite:///toml.db"\n')
        monkeypatch.setenv("SCENARIODB_DATABASE__URL", "sqlite:///env.db")
        assert ScenarioDbSettings.from_cli(start=tmp_path).database.url == "sqlite:///env.db"

    def test_db_url_flag_overrides_everything(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "scenariodb.toml").write_text("[database]\necho = true\n")
        monkeypatch.setenv("SCENARIODB_DATABASE__URL", "sqlite:///env.db")
        settings = ScenarioDbSettings.from_cli(start=tmp_path, db_url="sqlite:///flag.db")
        assert settings.database.url == "sqlite:///flag.db"
        assert settings.database.echo is True

    def test_cli_flags(self, tmp_path: Path) -> None:
        settings = ScenarioDbSettings.from_cli(start=tmp_path, verbose=True, log_json=True)
        assert settings.verbose is True
        assert settings.log_json is True
