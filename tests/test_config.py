"""Tests for spectools.config -- XDG paths, config files, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from spectools.config import (
    ENV_EXTRACT_DEFAULT,
    ENV_EXTRACT_DESCRIPTION,
    get_config_dir,
    load_global_config,
    load_project_config,
    resolve_output_format,
    resolve_visitor_config,
)
from spectools.exceptions import ConfigError
from spectools.models import GlobalConfig, VisitorConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _user_config(root: Path) -> Path:
    return root / "config" / "spectools" / "config.json"


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestConfigDir:
    def test_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("spectools.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "spectools"
        assert not result.exists()

    def test_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("spectools.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "custom"))
        assert get_config_dir() == tmp_path / "custom" / "spectools"

    def test_non_xdg_platform(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("spectools.config._is_xdg_platform", lambda: False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "ignored"))
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert get_config_dir() == tmp_path / ".spectools"


# ---------------------------------------------------------------------------
# Config files
# ---------------------------------------------------------------------------


class TestConfigFiles:
    def test_missing_global_config_gives_default(self, isolated_config: Path) -> None:
        assert load_global_config() == GlobalConfig()

    def test_global_config_is_loaded(self, isolated_config: Path) -> None:
        _write_json(
            _user_config(isolated_config),
            {"extraction": {"extract_default": True}, "output": {"format": "json"}},
        )
        config = load_global_config()
        assert config.extraction == VisitorConfig(extract_default=True)
        assert config.output.format == "json"

    def test_missing_project_config_gives_none(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_project_config_is_loaded(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "spectools.json", {"extraction": {"extract_description": True}})
        config = load_project_config()
        assert config is not None
        assert config.extraction.extract_description is True

    def test_invalid_json_raises(self, isolated_config: Path) -> None:
        path = _user_config(isolated_config)
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_invalid_shape_raises(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "spectools.json", {"extraction": {"extract_default": "maybe"}})
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveVisitorConfig:
    """Precedence: CLI > env > project > user > defaults."""

    def test_defaults(self, isolated_config: Path) -> None:
        assert resolve_visitor_config() == VisitorConfig()

    def test_user_config_applies(self, isolated_config: Path) -> None:
        _write_json(_user_config(isolated_config), {"extraction": {"extract_description": True}})
        config = resolve_visitor_config()
        assert config.extract_description is True
        assert config.extract_default is False

    def test_project_overrides_only_keys_it_sets(self, isolated_config: Path) -> None:
        _write_json(
            _user_config(isolated_config),
            {"extraction": {"extract_description": True, "extract_default": True}},
        )
        _write_json(isolated_config / "spectools.json", {"extraction": {"extract_default": False}})
        config = resolve_visitor_config()
        assert config.extract_description is True
        assert config.extract_default is False

    def test_project_without_extraction_leaves_user_config(self, isolated_config: Path) -> None:
        _write_json(_user_config(isolated_config), {"extraction": {"extract_default": True}})
        _write_json(isolated_config / "spectools.json", {"output": {"format": "plain"}})
        assert resolve_visitor_config().extract_default is True

    def test_env_overrides_project(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_config / "spectools.json", {"extraction": {"extract_description": True}})
        monkeypatch.setenv(ENV_EXTRACT_DESCRIPTION, "off")
        assert resolve_visitor_config().extract_description is False

    def test_cli_overrides_env(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(ENV_EXTRACT_DEFAULT, "yes")
        config = resolve_visitor_config(cli_extract_default=False)
        assert config.extract_default is False

    def test_cli_none_does_not_override(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(ENV_EXTRACT_DEFAULT, "1")
        config = resolve_visitor_config(cli_extract_description=True, cli_extract_default=None)
        assert config == VisitorConfig(extract_description=True, extract_default=True)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("1", True), ("TRUE", True), (" on ", True), ("0", False), ("No", False)],
    )
    def test_env_values(
        self,
        isolated_config: Path,
        monkeypatch: pytest.MonkeyPatch,
        value: str,
        expected: bool,
    ) -> None:
        monkeypatch.setenv(ENV_EXTRACT_DESCRIPTION, value)
        assert resolve_visitor_config().extract_description is expected

    def test_empty_env_value_is_ignored(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(_user_config(isolated_config), {"extraction": {"extract_description": True}})
        monkeypatch.setenv(ENV_EXTRACT_DESCRIPTION, "")
        assert resolve_visitor_config().extract_description is True

    def test_invalid_env_value_raises(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(ENV_EXTRACT_DEFAULT, "sometimes")
        with pytest.raises(ConfigError, match=ENV_EXTRACT_DEFAULT):
            resolve_visitor_config()


# ---------------------------------------------------------------------------
# Output format resolution
# ---------------------------------------------------------------------------


class TestResolveOutputFormat:
    def test_default_is_auto(self, isolated_config: Path) -> None:
        assert resolve_output_format() == "auto"

    def test_user_config_applies(self, isolated_config: Path) -> None:
        _write_json(_user_config(isolated_config), {"output": {"format": "plain"}})
        assert resolve_output_format() == "plain"

    def test_project_overrides_user_config(self, isolated_config: Path) -> None:
        _write_json(_user_config(isolated_config), {"output": {"format": "plain"}})
        _write_json(isolated_config / "spectools.json", {"output": {"format": "json"}})
        assert resolve_output_format() == "json"

    def test_project_without_output_leaves_user_config(self, isolated_config: Path) -> None:
        _write_json(_user_config(isolated_config), {"output": {"format": "rich"}})
        _write_json(isolated_config / "spectools.json", {"extraction": {"extract_default": True}})
        assert resolve_output_format() == "rich"

    def test_unknown_format_raises(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "spectools.json", {"output": {"format": "fancy"}})
        with pytest.raises(ConfigError, match="Invalid project config"):
            resolve_output_format()
