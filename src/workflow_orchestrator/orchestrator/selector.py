"""
Worker Selector - Maps classifier output to a ranked list of workers.

Heuristic selection recommends one worker per role (requirements, design,
implementation, testing, documentation, project management). Each role is
resolved against the registry first and falls back to the built-in catalog,
so a run never depends on the registry directory being populated.

An explicit list of worker names replaces the heuristics entirely.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import OrchestratorError
from ..models import (
	ComplexityLevel,
	ComplexityProfile,
	DomainProfile,
	Priority,
	Task,
	WorkerDescriptor,
	WorkerRecommendation,
)
from ..registry import DEFAULT_TRIAD, WorkerRegistry, builtin_descriptor

logger = logging.getLogger(__name__)

IMPLEMENTATION_SIGNALS = ("develop", "implement", "coding", "开发", "实现")
VERIFICATION_SIGNALS = ("test", "verify", "validation", "qa", "测试")
COORDINATION_SIGNALS = ("manage", "coordinate", "schedule", "管理", "协调")


@dataclass(frozen=True)
class Role:
	"""A worker slot the heuristics can fill."""
	key: str
	default_worker: str
	keywords: tuple[str, ...]
	reason: str
	confidence: float


REQUIREMENTS = Role(
	"requirements", "requirements-agent", ("requirements",),
	"Analyze and clarify task requirements", 0.9,
)
DESIGN = Role(
	"design", "design-agent", ("design", "architect"),
	"Design technical approach and architecture", 0.8,
)
IMPLEMENTATION = Role(
	"implementation", "coding-agent", ("coding", "implement", "develop"),
	"Implement code and features", 0.9,
)
TESTING = Role(
	"testing", "test-agent", ("test", "qa", "quality"),
	"Ensure quality and test coverage", 0.8,
)
DOCUMENTATION = Role(
	"documentation", "spec-agent", ("documentation", "specification"),
	"Write technical documentation and specifications", 0.7,
)
PROJECT_MANAGEMENT = Role(
	"project_management", "tasks-agent", ("project-management", "task-planning", "coordinat"),
	"Coordinate tasks and track progress", 0.8,
)

TESTING_PRIORITY = {
	ComplexityLevel.SIMPLE: Priority.LOW,
	ComplexityLevel.MEDIUM: Priority.MEDIUM,
	ComplexityLevel.COMPLEX: Priority.HIGH,
}


def _mentions(text: str, signals: tuple[str, ...]) -> bool:
	return any(s in text for s in signals)


def sort_by_priority(recommendations: list[WorkerRecommendation]) -> list[WorkerRecommendation]:
	"""Highest priority first; equal priorities keep their order."""
	return sorted(recommendations, key=lambda r: r.priority.rank, reverse=True)


class WorkerSelector:
	"""Chooses workers for a task."""

	def __init__(self, registry: Optional[WorkerRegistry] = None):
		self.registry = registry

	def _available(self) -> dict[str, WorkerDescriptor]:
		if self.registry is None:
			return {}
		return self.registry.discover()

	def resolve_role(self, role: Role) -> WorkerDescriptor:
		"""
		Find the worker that fills a role.

		Order: registry worker with the role's default name, then any registry
		worker whose name or capabilities match the role, then the built-in.
		"""
		available = self._available()
		if role.default_worker in available:
			return available[role.default_worker]
		for worker in available.values():
			if worker.matches_any(role.keywords):
				return worker
		descriptor = builtin_descriptor(role.default_worker)
		if descriptor is None:
			raise OrchestratorError(f"No built-in worker for role {role.key}")
		return descriptor

	def recommend(
		self,
		task: Task,
		complexity: ComplexityProfile,
		domain: DomainProfile,
	) -> list[WorkerRecommendation]:
		"""Heuristic recommendations, ranked by priority."""
		text = task.content.lower()
		level = complexity.level
		picks: list[tuple[Role, Priority]] = [(REQUIREMENTS, Priority.HIGH)]

		if level != ComplexityLevel.SIMPLE:
			picks.append((DESIGN, Priority.HIGH if level == ComplexityLevel.COMPLEX else Priority.MEDIUM))

		if "development" in domain.primary or _mentions(text, IMPLEMENTATION_SIGNALS):
			picks.append((IMPLEMENTATION, Priority.HIGH))

		if level == ComplexityLevel.COMPLEX or _mentions(text, VERIFICATION_SIGNALS):
			picks.append((TESTING, TESTING_PRIORITY[level]))

		if complexity.factors.get("documentation_need", 0) > 0 or level == ComplexityLevel.COMPLEX:
			picks.append((DOCUMENTATION, Priority.MEDIUM))

		if level == ComplexityLevel.COMPLEX or _mentions(text, COORDINATION_SIGNALS):
			picks.append((PROJECT_MANAGEMENT, Priority.MEDIUM))

		recommendations = [
			WorkerRecommendation(
				worker=self.resolve_role(role),
				priority=priority,
				reason=role.reason,
				confidence=role.confidence,
			)
			for role, priority in picks
		]
		return _dedupe(sort_by_priority(recommendations))

	def from_names(self, names: list[str]) -> list[WorkerRecommendation]:
		"""
		Recommendations for explicitly requested workers.

		Unknown names are dropped. If none survive, the default triad is used.
		"""
		available = self._available()
		recommendations: list[WorkerRecommendation] = []
		for name in names:
			worker = available.get(name)
			if worker is None:
				logger.warning(f"Requested worker not found in registry: {name}")
				continue
			recommendations.append(WorkerRecommendation(
				worker=worker,
				priority=Priority.HIGH,
				reason="Explicitly requested",
				confidence=1.0,
			))

		if recommendations:
			return _dedupe(recommendations)

		logger.info(f"No requested worker resolved, falling back to {', '.join(DEFAULT_TRIAD)}")
		for name in DEFAULT_TRIAD:
			worker = available.get(name) or builtin_descriptor(name)
			if worker is None:
				continue
			recommendations.append(WorkerRecommendation(
				worker=worker,
				priority=Priority.HIGH,
				reason="Default worker; no requested worker was found",
				confidence=0.6,
			))
		return recommendations

	def select(
		self,
		task: Task,
		complexity: ComplexityProfile,
		domain: DomainProfile,
		selected_workers: Optional[list[str]] = None,
	) -> list[WorkerRecommendation]:
		"""Explicit names win over heuristics whenever any are given."""
		if selected_workers:
			return self.from_names(selected_workers)
		return self.recommend(task, complexity, domain)


def _dedupe(recommendations: list[WorkerRecommendation]) -> list[WorkerRecommendation]:
	seen: set[str] = set()
	unique = []
	for rec in recommendations:
		if rec.worker.name in seen:
			continue
		seen.add(rec.worker.name)
		unique.append(rec)
	return unique
