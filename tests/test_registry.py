"""Tests for the worker registry."""

import threading
from pathlib import Path

import pytest
import yaml

from workflow_orchestrator.errors import RegistryConflict, RegistryError
from workflow_orchestrator.models import WorkerSpec
from workflow_orchestrator.registry import STANDARD_WORKERS, WorkerRegistry, builtin_descriptor, parse_worker_document

DESIGNER = """\
version: 1
name: designer
title: System Designer
description: Designs systems
capabilities:
  - system-design
  - Architecture-Design
resource_tier: premium
model: large
instructions: |
  You design systems.
"""


class TestParseWorkerDocument:
	"""Validation of a single worker document."""

	def test_parses_all_fields(self):
		worker = parse_worker_document(DESIGNER, "/tmp/designer.yaml")
		assert worker.name == "designer"
		assert worker.title == "System Designer"
		assert worker.capabilities == ["system-design", "Architecture-Design"]
		assert worker.resource_tier == "premium"
		assert worker.model == "large"
		assert worker.instructions == "You design systems."
		assert worker.source_path == "/tmp/designer.yaml"

	def test_missing_name(self):
		with pytest.raises(RegistryError, match="name"):
			parse_worker_document("instructions: hi\n")

	def test_empty_instructions(self):
		with pytest.raises(RegistryError, match="Instructions"):
			parse_worker_document("name: x\ninstructions: '  '\n")

	def test_not_a_mapping(self):
		with pytest.raises(RegistryError, match="structure"):
			parse_worker_document("- a\n- b\n")

	def test_bad_yaml(self):
		with pytest.raises(RegistryError, match="YAML"):
			parse_worker_document("name: [unclosed\n")

	def test_unknown_tier(self):
		with pytest.raises(RegistryError, match="resource_tier"):
			parse_worker_document("name: x\ninstructions: hi\nresource_tier: gold\n")

	def test_comma_separated_capabilities(self):
		worker = parse_worker_document("name: x\ninstructions: hi\ncapabilities: 'a, b'\n")
		assert worker.capabilities == ["a", "b"]


class TestWorkerRegistry:
	"""Discovery, filtering and creation."""

	@pytest.fixture
	def registry(self, tmp_path: Path) -> WorkerRegistry:
		directory = tmp_path / "agents"
		directory.mkdir()
		(directory / "designer.yaml").write_text(DESIGNER)
		(directory / "broken.yml").write_text("name: broken\n")
		(directory / "notes.txt").write_text("not a worker")
		return WorkerRegistry(directory)

	def test_discover_skips_invalid_files(self, registry):
		workers = registry.discover()
		assert list(workers) == ["designer"]
		invalid = registry.invalid_files
		assert len(invalid) == 1
		assert invalid[0].file == "broken.yml"
		assert "Instructions" in invalid[0].error

	def test_missing_directory_is_empty(self, tmp_path: Path):
		registry = WorkerRegistry(tmp_path / "nowhere")
		assert registry.list_workers() == []
		assert registry.invalid_files == []

	def test_capability_filter_is_case_insensitive_substring(self, registry):
		assert [w.name for w in registry.list_workers("architecture")] == ["designer"]
		assert [w.name for w in registry.list_workers("SYSTEM")] == ["designer"]
		assert registry.list_workers("testing") == []

	def test_duplicate_names_keep_first(self, registry):
		(registry.directory / "zz-copy.yaml").write_text(DESIGNER)
		workers = registry.discover(reload=True)
		assert workers["designer"].source_path.endswith("designer.yaml")
		assert any("Duplicate" in f.error for f in registry.invalid_files)

	def test_create_worker_writes_literal_instructions(self, registry):
		worker = registry.create_worker(WorkerSpec(
			name="tester",
			capabilities=["testing"],
			instructions="Line one\nLine two",
		))
		path = Path(worker.source_path)
		text = path.read_text()
		assert "instructions: |" in text
		assert yaml.safe_load(text)["capabilities"] == ["testing"]
		assert worker.instructions == "Line one\nLine two"
		assert registry.get_worker("tester") is not None

	def test_create_worker_generates_instructions(self, registry):
		worker = registry.create_worker(WorkerSpec(name="helper", capabilities=["triage"]))
		assert "triage" in worker.instructions

	def test_create_existing_worker_conflicts(self, registry):
		with pytest.raises(RegistryConflict, match="designer"):
			registry.create_worker(WorkerSpec(name="designer", instructions="again"))
		# Original document untouched
		assert "You design systems." in (registry.directory / "designer.yaml").read_text()

	def test_create_rejects_bad_names(self, registry):
		for name in ["", "Bad Name", "../escape", "-leading"]:
			with pytest.raises(RegistryError):
				registry.create_worker(WorkerSpec(name=name, instructions="x"))

	def test_create_rejects_unknown_tier(self, registry):
		with pytest.raises(RegistryError, match="resource_tier"):
			registry.create_worker(WorkerSpec(name="x", resource_tier="gold", instructions="x"))

	def test_create_makes_directory(self, tmp_path: Path):
		registry = WorkerRegistry(tmp_path / "new" / "agents")
		registry.create_worker(WorkerSpec(name="solo", instructions="x"))
		assert (tmp_path / "new" / "agents" / "solo.yaml").exists()

	def test_concurrent_creation_has_one_winner(self, tmp_path: Path):
		registry = WorkerRegistry(tmp_path / "agents")
		outcomes: list[str] = []

		def create():
			try:
				registry.create_worker(WorkerSpec(name="racer", instructions="x"))
				outcomes.append("created")
			except RegistryConflict:
				outcomes.append("conflict")

		threads = [threading.Thread(target=create) for _ in range(5)]
		for t in threads:
			t.start()
		for t in threads:
			t.join()

		assert outcomes.count("created") == 1
		assert outcomes.count("conflict") == 4

	def test_init_standard_workers(self, registry):
		result = registry.init_standard_workers()
		assert len(result["created"]) == len(STANDARD_WORKERS)
		assert result["skipped"] == []

		again = registry.init_standard_workers()
		assert again["created"] == []
		assert len(again["skipped"]) == len(STANDARD_WORKERS)

		names = {w.name for w in registry.list_workers()}
		assert {"requirements-agent", "design-agent", "coding-agent", "test-agent"} <= names


def test_builtin_descriptor():
	worker = builtin_descriptor("test-agent")
	assert worker is not None
	assert "testing" in worker.capabilities
	assert worker.source_path == ""
	assert builtin_descriptor("nobody") is None
