"""
Plan Builder - Turns selected workers into a phase graph.

Strategies:
- sequential: one phase per worker, chained in selection order
- parallel: a single phase holding every worker, no dependencies
- smart: canonical phases (requirements -> design -> implementation -> testing)
  kept only when some selected worker matches them, chained in canonical order

Every plan built here passes `validate_plan`; the validator exists for plans
that arrive from outside (e.g. an `execute_workflow` tool call).
"""

import logging
from dataclasses import dataclass

from ..models import (
	ComplexityLevel,
	ComplexityProfile,
	Dependency,
	DependencyType,
	Phase,
	Priority,
	Strategy,
	WorkerDescriptor,
	WorkflowPlan,
)

logger = logging.getLogger(__name__)

SEQUENTIAL_PHASE_DURATION = 60
PARALLEL_PHASE_DURATION = 90

DURATION_MULTIPLIERS = {
	"simple": 0.8,
	"medium": 1.0,
	"complex": 1.5,
	"high": 1.8,
}


@dataclass(frozen=True)
class PhaseTemplate:
	"""A canonical phase of the smart strategy."""
	name: str
	description: str
	keywords: tuple[str, ...]
	priority: Priority
	estimated_duration: int
	steps: tuple[str, ...]


# Canonical order
SMART_PHASES: tuple[PhaseTemplate, ...] = (
	PhaseTemplate(
		name="requirements_analysis",
		description="Analyze requirements and define specifications",
		keywords=("requirements", "spec"),
		priority=Priority.HIGH,
		estimated_duration=60,
		steps=("analyze_requirements", "define_specifications", "create_acceptance_criteria"),
	),
	PhaseTemplate(
		name="system_design",
		description="Design system architecture and technical solution",
		keywords=("design", "architect"),
		priority=Priority.HIGH,
		estimated_duration=90,
		steps=("design_system_architecture", "plan_technical_solution", "create_design_documents"),
	),
	PhaseTemplate(
		name="implementation",
		description="Implement features with unit tests and review",
		keywords=("coding", "develop", "implement"),
		priority=Priority.MEDIUM,
		estimated_duration=150,
		steps=("implement_core_features", "write_unit_tests", "code_review_and_refactor"),
	),
	PhaseTemplate(
		name="testing_validation",
		description="Execute tests and validate against requirements",
		keywords=("test", "qa", "quality"),
		priority=Priority.MEDIUM,
		estimated_duration=90,
		steps=("execute_test_plan", "validate_requirements", "quality_assurance_check"),
	),
)


def duration_tier(complexity: ComplexityProfile) -> str:
	"""Complex tasks under time pressure get the `high` tier."""
	if complexity.level == ComplexityLevel.COMPLEX and complexity.factors.get("time_sensitivity", 0) > 0:
		return "high"
	return complexity.level.value


def worker_step(worker: WorkerDescriptor) -> str:
	return f"execute_{worker.name.replace('-', '_')}_tasks"


class PlanBuilder:
	"""Builds a WorkflowPlan. Pure: same inputs give the same plan."""

	def build(
		self,
		complexity: ComplexityProfile,
		workers: list[WorkerDescriptor],
		strategy: Strategy = Strategy.SMART,
	) -> WorkflowPlan:
		tier = duration_tier(complexity)

		if strategy == Strategy.SEQUENTIAL:
			phases, dependencies = self._sequential(workers)
		elif strategy == Strategy.PARALLEL:
			phases, dependencies = self._parallel(workers)
		else:
			phases, dependencies = self._smart(workers, tier)

		total = sum(p.estimated_duration for p in phases)
		plan = WorkflowPlan(
			strategy=strategy,
			phases=phases,
			dependencies=dependencies,
			estimated_duration=round(total * DURATION_MULTIPLIERS[tier]),
		)
		logger.debug(f"Built {strategy.value} plan with {len(phases)} phases: {plan.phase_names}")
		return plan

	def _sequential(self, workers: list[WorkerDescriptor]) -> tuple[list[Phase], list[Dependency]]:
		phases: list[Phase] = []
		dependencies: list[Dependency] = []
		for i, worker in enumerate(workers):
			phase = Phase(
				name=f"phase_{i + 1}_{worker.name}",
				description=f"Sequential execution by {worker.name}",
				workers=[worker],
				priority=Priority.MEDIUM,
				estimated_duration=SEQUENTIAL_PHASE_DURATION,
				steps=[worker_step(worker)],
			)
			if phases:
				dependencies.append(Dependency(
					phase=phase.name,
					depends_on=[phases[-1].name],
					type=DependencyType.SEQUENTIAL,
				))
			phases.append(phase)
		return phases, dependencies

	def _parallel(self, workers: list[WorkerDescriptor]) -> tuple[list[Phase], list[Dependency]]:
		if not workers:
			return [], []
		phase = Phase(
			name="parallel_execution",
			description="Parallel execution by all selected workers",
			workers=list(workers),
			priority=Priority.HIGH,
			estimated_duration=PARALLEL_PHASE_DURATION,
			steps=[worker_step(w) for w in workers],
		)
		return [phase], []

	def _smart(self, workers: list[WorkerDescriptor], tier: str) -> tuple[list[Phase], list[Dependency]]:
		factor = 2 if tier == "high" else 1
		phases: list[Phase] = []
		dependencies: list[Dependency] = []

		for template in SMART_PHASES:
			members = [w for w in workers if w.matches_any(template.keywords)]
			if not members:
				continue

			phase = Phase(
				name=template.name,
				description=template.description,
				workers=members,
				priority=template.priority,
				estimated_duration=template.estimated_duration * factor,
				steps=list(template.steps),
			)

			present = [p.name for p in phases]
			if template.name == "testing_validation" and "implementation" in present:
				dependencies.append(Dependency(
					phase=phase.name,
					depends_on=["implementation"],
					type=DependencyType.VALIDATION,
				))
			elif present:
				dependencies.append(Dependency(
					phase=phase.name,
					depends_on=[present[-1]],
					type=DependencyType.PREREQUISITE,
				))

			phases.append(phase)

		return phases, dependencies


def validate_plan(plan: WorkflowPlan) -> list[str]:
	"""
	Check a plan's dependency relation.

	Returns:
		List of error messages; empty when the plan is valid
	"""
	errors: list[str] = []
	position: dict[str, int] = {}

	for i, phase in enumerate(plan.phases):
		if phase.name in position:
			errors.append(f"Duplicate phase name: {phase.name}")
			continue
		position[phase.name] = i

	graph: dict[str, list[str]] = {name: [] for name in position}
	for dep in plan.dependencies:
		if dep.phase not in position:
			errors.append(f"Dependency declared for unknown phase: {dep.phase}")
			continue
		for target in dep.depends_on:
			if target not in position:
				errors.append(f"Phase {dep.phase} depends on unknown phase: {target}")
				continue
			if position[target] >= position[dep.phase]:
				errors.append(f"Phase {dep.phase} depends on later phase: {target}")
			graph[dep.phase].append(target)

	cycle = _find_cycle(graph)
	if cycle:
		errors.append(f"Dependency cycle: {' -> '.join(cycle)}")

	return errors


def _find_cycle(graph: dict[str, list[str]]) -> list[str] | None:
	visiting: set[str] = set()
	done: set[str] = set()
	path: list[str] = []

	def visit(node: str) -> list[str] | None:
		visiting.add(node)
		path.append(node)
		for nxt in graph.get(node, []):
			if nxt in visiting:
				return path[path.index(nxt):] + [nxt]
			if nxt not in done:
				found = visit(nxt)
				if found:
					return found
		visiting.discard(node)
		done.add(node)
		path.pop()
		return None

	for node in graph:
		if node not in done:
			found = visit(node)
			if found:
				return found
	return None
