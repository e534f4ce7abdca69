"""
Worker Registry - Discovers, validates, and creates worker documents.

Each worker is one YAML document in the registry directory:

```
version: 1
name: design-agent
title: System Designer
description: System design and architecture specialist
capabilities:
  - system-design
  - architecture-design
resource_tier: standard
instructions: |
  You are a system design specialist...
```

Reads are cached and safe to share across runs. Creation is serialized and
never overwrites an existing worker.
"""

import logging
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import RegistryConflict, RegistryError
from ..models import WorkerDescriptor, WorkerSpec
from .catalog import STANDARD_WORKERS, default_instructions

logger = logging.getLogger(__name__)

WORKER_SUFFIXES = (".yaml", ".yml")
NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]*$")
RESOURCE_TIERS = {"standard", "premium"}


@dataclass
class InvalidWorkerFile:
	"""A registry document that failed validation."""
	file: str
	path: str
	error: str


class _LiteralDumper(yaml.SafeDumper):
	"""SafeDumper that writes multi-line strings as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
	if "\n" in data:
		return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
	return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_LiteralDumper.add_representer(str, _represent_str)


def parse_worker_document(content: str, source_path: str = "") -> WorkerDescriptor:
	"""
	Parse and validate a worker document.

	Args:
		content: YAML text
		source_path: Path recorded on the descriptor

	Returns:
		WorkerDescriptor

	Raises:
		RegistryError: If the document is not a valid worker definition
	"""
	try:
		data = yaml.safe_load(content)
	except yaml.YAMLError as e:
		raise RegistryError(f"YAML parsing error: {e}") from e

	if not isinstance(data, dict):
		raise RegistryError("Invalid YAML structure")

	name = data.get("name")
	if not name or not isinstance(name, str):
		raise RegistryError("Missing required field: name")

	instructions = data.get("instructions")
	if not isinstance(instructions, str) or not instructions.strip():
		raise RegistryError("Instructions field cannot be empty")

	capabilities_raw = data.get("capabilities") or []
	if isinstance(capabilities_raw, str):
		capabilities = [c.strip() for c in capabilities_raw.split(",") if c.strip()]
	elif isinstance(capabilities_raw, list):
		capabilities = [str(c).strip() for c in capabilities_raw if str(c).strip()]
	else:
		raise RegistryError("capabilities must be a list of strings")

	tier = str(data.get("resource_tier", "standard")).lower()
	if tier not in RESOURCE_TIERS:
		raise RegistryError(f"Unknown resource_tier: {tier}")

	try:
		version = int(data.get("version", 1))
	except (TypeError, ValueError) as e:
		raise RegistryError(f"Invalid version: {data.get('version')!r}") from e

	return WorkerDescriptor(
		name=name,
		title=str(data.get("title") or name),
		description=str(data.get("description") or ""),
		capabilities=capabilities,
		resource_tier=tier,
		instructions=instructions.strip(),
		version=version,
		model=str(data["model"]) if data.get("model") else None,
		source_path=source_path,
	)


def render_worker_document(spec: WorkerSpec) -> str:
	"""Serialize a worker spec into its YAML document."""
	document: dict[str, Any] = {
		"version": 1,
		"name": spec.name,
		"title": spec.title or spec.name,
		"description": spec.description or f"Worker handling {', '.join(spec.capabilities) or 'general tasks'}",
		"capabilities": list(spec.capabilities),
		"resource_tier": spec.resource_tier,
		"instructions": (spec.instructions or default_instructions(spec)).strip() + "\n",
	}
	return yaml.dump(
		document,
		Dumper=_LiteralDumper,
		sort_keys=False,
		allow_unicode=True,
		default_flow_style=False,
	)


class WorkerRegistry:
	"""
	Loads worker descriptors from a directory of YAML documents.

	Invalid documents are skipped and reported through `invalid_files`
	instead of failing the whole listing.
	"""

	def __init__(self, directory: Path | str):
		"""
		Initialize the registry.

		Args:
			directory: Directory holding the worker documents
		"""
		self.directory = Path(directory)
		self._cache: dict[str, WorkerDescriptor] = {}
		self._invalid: list[InvalidWorkerFile] = []
		self._loaded = False
		self._write_lock = threading.Lock()

	@property
	def invalid_files(self) -> list[InvalidWorkerFile]:
		if not self._loaded:
			self.discover()
		return list(self._invalid)

	def discover(self, reload: bool = False) -> dict[str, WorkerDescriptor]:
		"""
		Discover all workers in the registry directory.

		Args:
			reload: Force reload even if already cached

		Returns:
			Dict mapping worker name to descriptor
		"""
		if self._loaded and not reload:
			return self._cache

		workers: dict[str, WorkerDescriptor] = {}
		invalid: list[InvalidWorkerFile] = []

		if self.directory.is_dir():
			for path in sorted(self.directory.iterdir()):
				if path.suffix not in WORKER_SUFFIXES or not path.is_file():
					continue
				try:
					worker = parse_worker_document(path.read_text(encoding="utf-8"), str(path))
				except (RegistryError, OSError, UnicodeDecodeError) as e:
					invalid.append(InvalidWorkerFile(file=path.name, path=str(path), error=str(e)))
					logger.warning(f"Invalid worker document {path.name}: {e}")
					continue
				if worker.name in workers:
					invalid.append(InvalidWorkerFile(
						file=path.name,
						path=str(path),
						error=f"Duplicate worker name: {worker.name}",
					))
					logger.warning(f"Duplicate worker '{worker.name}' in {path.name}, keeping first")
					continue
				workers[worker.name] = worker
		else:
			logger.debug(f"Worker directory does not exist: {self.directory}")

		self._cache = workers
		self._invalid = invalid
		self._loaded = True
		logger.info(f"Discovered {len(workers)} workers in {self.directory}")

		return self._cache

	def list_workers(self, capability: Optional[str] = None) -> list[WorkerDescriptor]:
		"""
		List workers, optionally filtered by capability.

		Args:
			capability: Case-insensitive substring matched against capability tags

		Returns:
			Worker descriptors in name order
		"""
		workers = list(self.discover().values())
		if capability:
			needle = capability.lower()
			workers = [
				w for w in workers
				if any(needle in cap.lower() for cap in w.capabilities)
			]
		return workers

	def get_worker(self, name: str) -> Optional[WorkerDescriptor]:
		"""Get a worker by name."""
		return self.discover().get(name)

	def create_worker(self, spec: WorkerSpec) -> WorkerDescriptor:
		"""
		Create a new worker document.

		Args:
			spec: Worker definition

		Returns:
			Descriptor parsed back from the written document

		Raises:
			RegistryConflict: If a worker with this name already exists
			RegistryError: If the name is invalid or the document fails validation
		"""
		if not NAME_PATTERN.match(spec.name or ""):
			raise RegistryError(
				f"Invalid worker name {spec.name!r}: use lowercase letters, digits, '-' or '_'"
			)
		if spec.resource_tier not in RESOURCE_TIERS:
			raise RegistryError(f"Unknown resource_tier: {spec.resource_tier}")

		with self._write_lock:
			if spec.name in self.discover(reload=True):
				raise RegistryConflict(spec.name)

			self.directory.mkdir(parents=True, exist_ok=True)
			path = self.directory / f"{spec.name}.yaml"
			content = render_worker_document(spec)

			try:
				with open(path, "x", encoding="utf-8") as f:
					f.write(content)
			except FileExistsError as e:
				raise RegistryConflict(spec.name) from e

			try:
				worker = parse_worker_document(path.read_text(encoding="utf-8"), str(path))
			except RegistryError:
				path.unlink(missing_ok=True)
				raise

			# Invalidate cache
			self._loaded = False

		logger.info(f"Created worker {spec.name} at {path}")
		return worker

	def init_standard_workers(self) -> dict[str, list[str]]:
		"""
		Create the standard worker set, skipping names that already exist.

		Returns:
			Dict with `created` and `skipped` worker names
		"""
		created: list[str] = []
		skipped: list[str] = []
		for spec in STANDARD_WORKERS:
			try:
				self.create_worker(spec)
				created.append(spec.name)
			except RegistryConflict:
				skipped.append(spec.name)
		return {"created": created, "skipped": skipped}
