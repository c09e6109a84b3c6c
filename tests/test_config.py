"""
Tests for configuration defaults, TOML loading and validation.
"""
from pathlib import Path

import pytest

from dupfinder.core.config import (
    CONFIG_FILE_NAME, DEFAULT_IGNORE_PATTERNS, AppConfig, default_data_dir, load_config)
from dupfinder.core.exceptions import ConfigError


class TestDefaults:
    """Test built-in defaults."""

    def test_default_values(self, data_dir):
        config = AppConfig()
        assert config.ignore_patterns == list(DEFAULT_IGNORE_PATTERNS)
        assert config.ignore_file_names == [".gitignore", ".dupignore"]
        assert config.report_output_path == "./duplicate-report.md"
        assert config.confirm_destructive_actions is True
        assert config.use_trash is False
        assert config.data_dir == data_dir

    def test_data_dir_falls_back_to_home(self, monkeypatch):
        monkeypatch.delenv("DUPFINDER_HOME", raising=False)
        assert default_data_dir() == Path.home() / ".dupfinder"

    def test_missing_default_file_gives_defaults(self, data_dir):
        assert load_config() == AppConfig()


class TestLoadConfig:
    """Test reading config.toml."""

    def test_reads_file_from_data_dir(self, data_dir):
        data_dir.mkdir(parents=True)
        (data_dir / CONFIG_FILE_NAME).write_text(
            'ignore_patterns = ["*.bak"]\nuse_trash = true\n', encoding="utf-8")

        config = load_config()

        assert config.ignore_patterns == ["*.bak"]
        assert config.use_trash is True
        assert config.confirm_destructive_actions is True

    def test_explicit_path(self, tmp_path):
        cfg = tmp_path / "custom.toml"
        cfg.write_text(
            f'data_dir = "{(tmp_path / "state").as_posix()}"\nconfirm_destructive_actions = false\n',
            encoding="utf-8")

        config = load_config(str(cfg))

        assert config.data_dir == tmp_path / "state"
        assert config.confirm_destructive_actions is False

    def test_explicit_missing_path_raises(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(str(tmp_path / "absent.toml"))

    def test_invalid_toml_raises(self, tmp_path):
        cfg = tmp_path / "broken.toml"
        cfg.write_text("ignore_patterns = [", encoding="utf-8")
        with pytest.raises(ConfigError, match="invalid TOML"):
            load_config(str(cfg))


class TestValidation:
    """Test rejection of unknown keys and wrong types."""

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="unknown option"):
            AppConfig.from_dict({"colour": "blue"})

    @pytest.mark.parametrize("data", [
        {"ignore_patterns": "*.log"},
        {"ignore_file_names": [1, 2]},
        {"data_dir": 42},
        {"use_trash": "yes"},
        {"confirm_destructive_actions": 1},
    ])
    def test_wrong_types(self, data):
        with pytest.raises(ConfigError):
            AppConfig.from_dict(data)
