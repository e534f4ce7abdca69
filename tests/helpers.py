"""Shared test fixtures and helpers for workflow-orchestrator tests."""

import asyncio
from pathlib import Path
from typing import Callable

from workflow_orchestrator.config import Config
from workflow_orchestrator.errors import StepFailure
from workflow_orchestrator.models import (
	Dependency,
	DependencyType,
	Phase,
	PhaseContext,
	StepOutcome,
	Strategy,
	WorkerDescriptor,
	WorkflowPlan,
)


def make_config(tmp_path: Path, **overrides) -> Config:
	"""Config rooted in a temporary directory."""
	config = Config(
		config_dir=tmp_path / "config",
		data_dir=tmp_path / "data",
		worker_directory=tmp_path / "agents",
		**overrides,
	)
	config.ensure_dirs()
	return config


def make_worker(name: str, *capabilities: str) -> WorkerDescriptor:
	return WorkerDescriptor(name=name, title=name, capabilities=list(capabilities), instructions="Do the work.")


def make_sequential_plan(*steps_per_phase: list[str]) -> WorkflowPlan:
	"""Linear plan with one phase per entry; phase i runs the given steps."""
	phases = []
	dependencies = []
	for i, steps in enumerate(steps_per_phase):
		name = f"phase_{i + 1}"
		phases.append(Phase(
			name=name,
			description=f"Phase {i + 1}",
			workers=[make_worker(f"worker-{i + 1}", "implementation")],
			steps=list(steps),
		))
		if i > 0:
			dependencies.append(Dependency(
				phase=name,
				depends_on=[f"phase_{i}"],
				type=DependencyType.SEQUENTIAL,
			))
	return WorkflowPlan(strategy=Strategy.SEQUENTIAL, phases=phases, dependencies=dependencies)


class RecordingInvoker:
	"""Succeeds on every step except those listed, recording each call."""

	def __init__(self, fail: set[str] | None = None, raise_on: set[str] | None = None):
		self.fail = fail or set()
		self.raise_on = raise_on or set()
		self.calls: list[tuple[str, PhaseContext]] = []

	@property
	def steps(self) -> list[str]:
		return [step for step, _ in self.calls]

	async def invoke(self, step: str, context: PhaseContext) -> StepOutcome:
		self.calls.append((step, context))
		if step in self.raise_on:
			raise StepFailure(f"{step} blew up")
		if step in self.fail:
			return StepOutcome.fail(f"{step} failed")
		return StepOutcome.ok(f"output of {step}")


class SlowInvoker:
	"""Sleeps before answering; used to trip the phase deadline."""

	def __init__(self, delay: float):
		self.delay = delay

	async def invoke(self, step: str, context: PhaseContext) -> StepOutcome:
		await asyncio.sleep(self.delay)
		return StepOutcome.ok(step)


def capture_tools(orchestrator, register_fn: Callable) -> dict:
	"""Register tools on a mock MCP and return the captured tool functions.

	Args:
		orchestrator: Orchestrator passed to the registration function
		register_fn: The registration function (e.g., register_worker_tools)

	Returns:
		Dict mapping tool name to the tool function
	"""
	captured = {}

	class MockMCP:
		def tool(self):
			def decorator(fn):
				captured[fn.__name__] = fn
				return fn
			return decorator

	register_fn(MockMCP(), orchestrator)
	return captured
