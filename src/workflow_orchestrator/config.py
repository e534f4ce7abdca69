"""Configuration system using platformdirs for cross-platform paths."""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import platformdirs

from .models import Strategy

APP_NAME = "workflow-orchestrator"
APP_AUTHOR = "workflow-orchestrator"

logger = logging.getLogger(__name__)


@dataclass
class Config:
	"""Central configuration, passed explicitly into the orchestrator."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))

	# Derived paths
	log_dir: Path = field(init=False)
	runs_db_path: Path = field(init=False)

	# User-configurable
	worker_directory: Path = field(default_factory=lambda: Path.cwd() / "agents")
	strategy: Strategy = Strategy.SMART
	max_iterations: int = 5
	context_sharing: bool = True
	phase_timeout: float = 300.0
	parallel_phases: bool = False
	archive_runs: bool = True
	log_level: str = "INFO"

	def __post_init__(self) -> None:
		self.log_dir = self.data_dir / "logs"
		self.runs_db_path = self.data_dir / "runs.db"

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)


PATH_FIELDS = {"config_dir", "data_dir", "worker_directory"}


def _coerce(attr: str, raw: object) -> object:
	"""Convert a raw env/toml value to the type of a Config field."""
	if attr in PATH_FIELDS:
		return Path(os.path.expanduser(str(raw)))
	if attr == "strategy":
		return Strategy(str(raw).lower())
	if attr == "max_iterations":
		value = int(raw)
		if value < 1:
			raise ValueError("max_iterations must be >= 1")
		return value
	if attr == "phase_timeout":
		value = float(raw)
		if value <= 0:
			raise ValueError("phase_timeout must be positive")
		return value
	if attr in {"context_sharing", "parallel_phases", "archive_runs"}:
		if isinstance(raw, bool):
			return raw
		return str(raw).strip().lower() in {"1", "true", "yes", "on"}
	return raw


def _apply_env_overrides(config: Config) -> Config:
	"""Apply WORKFLOW_ORCHESTRATOR_* environment variable overrides."""
	env_map = {
		"WORKFLOW_ORCHESTRATOR_CONFIG_DIR": "config_dir",
		"WORKFLOW_ORCHESTRATOR_DATA_DIR": "data_dir",
		"WORKFLOW_ORCHESTRATOR_WORKER_DIRECTORY": "worker_directory",
		"WORKFLOW_ORCHESTRATOR_STRATEGY": "strategy",
		"WORKFLOW_ORCHESTRATOR_MAX_ITERATIONS": "max_iterations",
		"WORKFLOW_ORCHESTRATOR_CONTEXT_SHARING": "context_sharing",
		"WORKFLOW_ORCHESTRATOR_PHASE_TIMEOUT": "phase_timeout",
		"WORKFLOW_ORCHESTRATOR_PARALLEL_PHASES": "parallel_phases",
		"WORKFLOW_ORCHESTRATOR_ARCHIVE_RUNS": "archive_runs",
		"LOG_LEVEL": "log_level",
	}
	for env_key, attr in env_map.items():
		val = os.getenv(env_key)
		if not val:
			continue
		try:
			setattr(config, attr, _coerce(attr, val))
		except (TypeError, ValueError) as e:
			logger.warning(f"Ignoring {env_key}={val!r}: {e}")
	# Recompute derived paths after overrides
	config.__post_init__()
	return config


def _apply_toml(config: Config) -> Config:
	"""Apply config.toml overrides if file exists."""
	toml_path = config.config_dir / "config.toml"
	if not toml_path.exists():
		return config

	with open(toml_path, "rb") as f:
		data = tomllib.load(f)

	for key, val in data.items():
		if key in {"log_dir", "runs_db_path"} or not hasattr(config, key):
			continue
		try:
			setattr(config, key, _coerce(key, val))
		except (TypeError, ValueError) as e:
			logger.warning(f"Ignoring {key} in {toml_path}: {e}")

	# Recompute derived paths after toml overrides
	config.__post_init__()
	return config


def load_config() -> Config:
	"""Load config with precedence: env vars > config.toml > defaults."""
	config = Config()
	config = _apply_toml(config)
	config = _apply_env_overrides(config)
	config.ensure_dirs()
	return config
