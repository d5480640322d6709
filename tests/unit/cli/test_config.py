"""Unit tests for config commands."""

import tomllib
from pathlib import Path

from typer.testing import CliRunner
from vmsnap.cli.main import app
from vmsnap.configs.config import VmsnapConfig, load_config, save_config
from vmsnap.core.paths import get_config_path
from vmsnap.models.frequency import Frequency

runner = CliRunner()


class TestConfigShow:
    """Tests for vmsnap config show."""

    def test_show_defaults(self) -> None:
        """Without a file the defaults are shown."""
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "group_by" in result.output
        assert "month" in result.output

    def test_show_toml(self, tmp_path: Path) -> None:
        """--toml prints the effective configuration as TOML."""
        path = tmp_path / "custom.toml"
        save_config(VmsnapConfig(output_dir=Path("/backups"), group_by=Frequency.QUARTER), path)

        result = runner.invoke(app, ["--config", str(path), "config", "show", "--toml"])

        assert result.exit_code == 0
        data = tomllib.loads(result.stdout)
        assert data["output_dir"] == "/backups"
        assert data["group_by"] == "quarter"

    def test_show_invalid_file(self, tmp_path: Path) -> None:
        """An invalid config file exits with the generic failure code."""
        path = tmp_path / "broken.toml"
        path.write_text("group_by = [\n")

        result = runner.invoke(app, ["--config", str(path), "config", "show"])

        assert result.exit_code == 3
        assert "Invalid TOML syntax" in result.output


class TestConfigInit:
    """Tests for vmsnap config init."""

    def test_init_writes_default_path(self) -> None:
        """init writes the default config location."""
        result = runner.invoke(app, ["config", "init", "--output", "/backups"])

        assert result.exit_code == 0
        assert "Config written" in result.output
        assert load_config().output_dir == Path("/backups")

    def test_init_keeps_existing(self) -> None:
        """An existing file is left alone without --force."""
        path = get_config_path()
        save_config(VmsnapConfig(group_by=Frequency.YEAR), path)

        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 0
        assert "Config already exists" in result.output
        assert load_config(path).group_by == Frequency.YEAR

    def test_init_force(self, tmp_path: Path) -> None:
        """--force overwrites an existing file."""
        path = tmp_path / "config.toml"
        save_config(VmsnapConfig(group_by=Frequency.YEAR), path)

        result = runner.invoke(app, ["--config", str(path), "config", "init", "--force"])

        assert result.exit_code == 0
        assert load_config(path).group_by == Frequency.MONTH
