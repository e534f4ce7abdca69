"""Tests for the CLI module."""

import json
import os
import sys
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import patch

import pytest

from workflow_orchestrator.cli import _check_config_toml, _parse_since, _split, main


@pytest.fixture
def env(tmp_path: Path):
	"""Point every CLI command at temporary directories."""
	with patch.dict(os.environ, {
		"WORKFLOW_ORCHESTRATOR_DATA_DIR": str(tmp_path / "data"),
		"WORKFLOW_ORCHESTRATOR_CONFIG_DIR": str(tmp_path / "config"),
		"WORKFLOW_ORCHESTRATOR_WORKER_DIRECTORY": str(tmp_path / "agents"),
		"COLUMNS": "200",
	}):
		yield tmp_path


def _run(*argv: str) -> None:
	with patch.object(sys, "argv", ["workflow-orchestrator", *argv]):
		main()


def test_split():
	assert _split("a, b") == ["a", "b"]
	assert _split(None) is None
	assert _split(" , ") is None


def test_parse_since_hours():
	result = datetime.fromisoformat(_parse_since("2h"))
	expected = datetime.now() - timedelta(hours=2)
	assert abs((result - expected).total_seconds()) < 5


def test_parse_since_days():
	result = datetime.fromisoformat(_parse_since("7d"))
	expected = datetime.now() - timedelta(days=7)
	assert abs((result - expected).total_seconds()) < 5


def test_parse_since_invalid():
	with pytest.raises(SystemExit):
		_parse_since("yesterday")


def test_check_config_toml_missing(tmp_path: Path):
	status, issue = _check_config_toml(tmp_path)
	assert status == "not found (optional)"
	assert issue is None


def test_check_config_toml_invalid(tmp_path: Path):
	(tmp_path / "config.toml").write_text("strategy = \n")
	status, issue = _check_config_toml(tmp_path)
	assert status.startswith("INVALID")
	assert "parse error" in issue


def test_no_command_prints_help(capsys):
	with pytest.raises(SystemExit) as exc_info:
		_run()
	assert exc_info.value.code == 1
	assert "usage" in capsys.readouterr().out


def test_workers_init_then_list(env, capsys):
	_run("workers", "init")
	out = capsys.readouterr().out
	assert "Created: requirements-agent" in out
	assert (env / "agents" / "test-agent.yaml").exists()

	_run("workers", "list", "--capability", "testing")
	assert "test-agent" in capsys.readouterr().out


def test_workers_defaults_to_list(env, capsys):
	_run("workers")
	assert "No workers found." in capsys.readouterr().out


def test_workers_create(env, capsys, tmp_path: Path):
	instructions = tmp_path / "instructions.md"
	instructions.write_text("Review every migration.\n")

	_run(
		"workers", "create", "migration-reviewer",
		"--capabilities", "database, review",
		"--instructions-file", str(instructions),
	)
	assert "Created worker migration-reviewer" in capsys.readouterr().out

	with pytest.raises(SystemExit) as exc_info:
		_run("workers", "create", "migration-reviewer")
	assert exc_info.value.code == 1
	assert "already exists" in capsys.readouterr().err


def test_workers_custom_directory(env, capsys, tmp_path: Path):
	custom = tmp_path / "custom"
	_run("workers", "--worker-dir", str(custom), "init")
	capsys.readouterr()
	assert (custom / "coding-agent.yaml").exists()


def test_run_plan_only_json(env, capsys):
	_run("run", "Build a login page", "--plan-only", "--json", "--strategy", "sequential")
	plan = json.loads(capsys.readouterr().out)
	assert plan["strategy"] == "sequential"
	assert plan["phases"][0]["name"] == "phase_1_requirements-agent"


def test_run_json_and_history(env, capsys):
	_run("run", "Build a login page", "--json", "--max-iterations", "1", "--workers", "nonexistent-worker")
	response = json.loads(capsys.readouterr().out)
	assert response["iterations_used"] == 1
	assert response["status"] == "completed"

	_run("history")
	assert response["workflow_id"] in capsys.readouterr().out


def test_run_rejects_bad_budget(env, capsys):
	with pytest.raises(SystemExit) as exc_info:
		_run("run", "Build a login page", "--max-iterations", "0")
	assert exc_info.value.code == 1
	assert "max_iterations" in capsys.readouterr().err


def test_history_unknown_run(env, capsys):
	with pytest.raises(SystemExit):
		_run("history", "wf_missing")
	assert "not found" in capsys.readouterr().out
