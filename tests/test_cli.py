"""
Tests for the command line interface.

Author: mirrorkeep Project
License: MIT
"""

import pytest
import yaml
from typer.testing import CliRunner

from mirrorkeep.cli import app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path, trees):
    source, backup, tombstone = trees
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "app": {"log_level": "WARNING"},
        "sync": {
            "source_root": str(source),
            "backup_root": str(backup),
            "tombstone_root": str(tombstone),
        },
    }))
    return path


def test_once_runs_a_cycle(config_file, trees, make_file):
    """Test that `once` mirrors the source and exits cleanly."""
    source, backup, _ = trees
    make_file(source, "a.txt", "hello")

    result = runner.invoke(app, ["once", "--config", str(config_file)])

    assert result.exit_code == 0
    assert "copied=1" in result.output
    assert (backup / "a.txt").read_text() == "hello"


def test_plan_lists_actions_without_executing(config_file, trees, make_file):
    """Test that `plan` reports pending work and changes nothing."""
    source, backup, _ = trees
    make_file(source, "docs/new.txt")

    result = runner.invoke(app, ["plan", "--config", str(config_file)])

    assert result.exit_code == 0
    assert "copy docs/new.txt" in result.output
    assert not backup.exists()


def test_once_fails_on_missing_source(tmp_path):
    """Test that a structural failure gives a non-zero exit code."""
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "sync": {
            "source_root": str(tmp_path / "missing"),
            "backup_root": str(tmp_path / "backup"),
            "tombstone_root": str(tmp_path / "deleted"),
        },
    }))

    result = runner.invoke(app, ["once", "--config", str(path)])

    assert result.exit_code == 1


def test_invalid_config_exit_code(tmp_path):
    """Test that configuration errors exit with code 2."""
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"sync": {"source_root": "relative"}}))

    result = runner.invoke(app, ["once", "--config", str(path)])

    assert result.exit_code == 2
