"""Unit tests for vmsnap configuration."""

import tomllib
from pathlib import Path

import pytest
from pydantic import ValidationError
from vmsnap.configs.config import (
    ConfigError,
    ConfigParseError,
    VmsnapConfig,
    config_to_dict,
    load_config,
    save_config,
)
from vmsnap.core.paths import get_config_path
from vmsnap.models.frequency import Frequency


class TestVmsnapConfig:
    """Tests for the VmsnapConfig model."""

    def test_defaults(self) -> None:
        """Defaults group monthly with no output directory."""
        config = VmsnapConfig()

        assert config.output_dir is None
        assert config.group_by == Frequency.MONTH
        assert config.prune is False
        assert config.raw is False
        assert config.lock_retries == 10
        assert config.lock_retry_wait == 10.0
        assert config.lock_path is None

    def test_group_by_case_insensitive(self) -> None:
        """Frequencies are accepted in any case."""
        assert VmsnapConfig(group_by="Bi-Annual").group_by == Frequency.BI_ANNUAL

    def test_invalid_group_by(self) -> None:
        """Unknown frequencies are rejected."""
        with pytest.raises(ValidationError):
            VmsnapConfig(group_by="weekly")

    def test_unknown_key(self) -> None:
        """Unknown keys are rejected."""
        with pytest.raises(ValidationError):
            VmsnapConfig(compress=True)

    def test_negative_retries(self) -> None:
        """Lock retries cannot be negative."""
        with pytest.raises(ValidationError):
            VmsnapConfig(lock_retries=-1)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """A missing config file is not an error."""
        assert load_config(tmp_path / "config.toml") == VmsnapConfig()

    def test_default_path(self) -> None:
        """Without a path the XDG config location is read."""
        path = get_config_path()
        path.parent.mkdir(parents=True)
        path.write_text('group_by = "year"\n')

        assert load_config().group_by == Frequency.YEAR

    def test_loads_values(self, tmp_path: Path) -> None:
        """Values from the file override defaults."""
        path = tmp_path / "config.toml"
        path.write_text(
            'output_dir = "/backups"\ngroup_by = "quarter"\nprune = true\nlock_retries = 3\n'
        )

        config = load_config(path)

        assert config.output_dir == Path("/backups")
        assert config.group_by == Frequency.QUARTER
        assert config.prune is True
        assert config.lock_retries == 3

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Broken TOML raises ConfigParseError."""
        path = tmp_path / "config.toml"
        path.write_text("group_by = \n")

        with pytest.raises(ConfigParseError, match="Invalid TOML syntax"):
            load_config(path)

    def test_invalid_content(self, tmp_path: Path) -> None:
        """Schema violations raise ConfigError."""
        path = tmp_path / "config.toml"
        path.write_text('group_by = "weekly"\n')

        with pytest.raises(ConfigError, match="Invalid config content"):
            load_config(path)


class TestSaveConfig:
    """Tests for save_config function."""

    def test_round_trip(self, tmp_path: Path) -> None:
        """A saved config loads back unchanged."""
        path = tmp_path / "nested" / "config.toml"
        config = VmsnapConfig(
            output_dir=Path("/backups"),
            group_by=Frequency.BI_ANNUAL,
            raw=True,
            lock_path=Path("/run/vmsnap.lock"),
        )

        saved = save_config(config, path)

        assert saved == path
        assert load_config(path) == config

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        """Atomic write leaves only the config file behind."""
        path = tmp_path / "config.toml"

        save_config(VmsnapConfig(), path)

        assert [p.name for p in tmp_path.iterdir()] == ["config.toml"]

    def test_write_failure(self, tmp_path: Path) -> None:
        """A path that cannot be created raises ConfigError."""
        blocker = tmp_path / "file"
        blocker.write_text("")

        with pytest.raises(ConfigError, match="Failed to write config"):
            save_config(VmsnapConfig(), blocker / "config.toml")


class TestConfigToDict:
    """Tests for config_to_dict function."""

    def test_omits_unset_paths(self) -> None:
        """Paths that are not set are left out."""
        data = config_to_dict(VmsnapConfig())

        assert "output_dir" not in data
        assert "lock_path" not in data
        assert data["group_by"] == "month"

    def test_toml_serializable(self, tmp_path: Path) -> None:
        """The dictionary survives a TOML write."""
        path = save_config(VmsnapConfig(output_dir=tmp_path), tmp_path / "config.toml")

        with open(path, "rb") as f:
            assert tomllib.load(f)["output_dir"] == str(tmp_path)
