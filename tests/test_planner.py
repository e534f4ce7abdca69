"""Tests for plan building and plan validation."""

import pytest

from workflow_orchestrator.models import (
	ComplexityLevel,
	ComplexityProfile,
	Dependency,
	DependencyType,
	Phase,
	Priority,
	Strategy,
	WorkflowPlan,
)
from workflow_orchestrator.orchestrator.planner import PlanBuilder, duration_tier, validate_plan, worker_step

from .helpers import make_sequential_plan, make_worker


def _profile(level: ComplexityLevel, **factors: float) -> ComplexityProfile:
	return ComplexityProfile(level=level, score=sum(factors.values()), factors=factors, confidence=0.8)


SIMPLE = _profile(ComplexityLevel.SIMPLE)
MEDIUM = _profile(ComplexityLevel.MEDIUM)

ANALYST = make_worker("analyst", "requirements-analysis")
DESIGNER = make_worker("designer", "architecture")
CODER = make_worker("coder", "implementation")
TESTER = make_worker("tester", "qa")
WRITER = make_worker("writer", "copy-editing")


@pytest.fixture
def builder():
	return PlanBuilder()


class TestSequential:

	def test_one_phase_per_worker(self, builder):
		plan = builder.build(MEDIUM, [ANALYST, CODER, TESTER], Strategy.SEQUENTIAL)
		assert plan.phase_names == ["phase_1_analyst", "phase_2_coder", "phase_3_tester"]
		assert plan.phases[1].steps == ["execute_coder_tasks"]
		assert plan.phases[1].worker_names == ["coder"]
		assert [(d.phase, d.depends_on) for d in plan.dependencies] == [
			("phase_2_coder", ["phase_1_analyst"]),
			("phase_3_tester", ["phase_2_coder"]),
		]
		assert all(d.type == DependencyType.SEQUENTIAL for d in plan.dependencies)
		assert plan.estimated_duration == 180

	def test_step_names_replace_dashes(self):
		assert worker_step(make_worker("design-agent")) == "execute_design_agent_tasks"

	def test_no_workers(self, builder):
		plan = builder.build(MEDIUM, [], Strategy.SEQUENTIAL)
		assert plan.phases == []
		assert plan.dependencies == []


class TestParallel:

	def test_single_phase(self, builder):
		plan = builder.build(SIMPLE, [ANALYST, CODER], Strategy.PARALLEL)
		assert plan.phase_names == ["parallel_execution"]
		phase = plan.phases[0]
		assert phase.priority == Priority.HIGH
		assert phase.steps == ["execute_analyst_tasks", "execute_coder_tasks"]
		assert plan.dependencies == []
		assert plan.estimated_duration == round(90 * 0.8)

	def test_no_workers(self, builder):
		assert builder.build(SIMPLE, [], Strategy.PARALLEL).phases == []


class TestSmart:

	def test_full_canonical_chain(self, builder):
		plan = builder.build(MEDIUM, [TESTER, CODER, DESIGNER, ANALYST], Strategy.SMART)
		assert plan.phase_names == [
			"requirements_analysis", "system_design", "implementation", "testing_validation",
		]
		edges = {d.phase: (d.depends_on, d.type) for d in plan.dependencies}
		assert edges["system_design"] == (["requirements_analysis"], DependencyType.PREREQUISITE)
		assert edges["implementation"] == (["system_design"], DependencyType.PREREQUISITE)
		assert edges["testing_validation"] == (["implementation"], DependencyType.VALIDATION)
		assert "requirements_analysis" not in edges
		assert plan.estimated_duration == 60 + 90 + 150 + 90

	def test_phases_without_members_are_dropped(self, builder):
		plan = builder.build(MEDIUM, [ANALYST, TESTER], Strategy.SMART)
		assert plan.phase_names == ["requirements_analysis", "testing_validation"]
		# No implementation phase, so testing chains to the nearest earlier phase
		dep = plan.dependencies[0]
		assert dep.phase == "testing_validation"
		assert dep.depends_on == ["requirements_analysis"]
		assert dep.type == DependencyType.PREREQUISITE
		assert validate_plan(plan) == []

	def test_unmatched_workers_give_empty_plan(self, builder):
		plan = builder.build(MEDIUM, [WRITER], Strategy.SMART)
		assert plan.phases == []
		assert plan.estimated_duration == 0

	def test_phase_collects_every_matching_worker(self, builder):
		second_coder = make_worker("dev-2", "develop")
		plan = builder.build(MEDIUM, [CODER, second_coder], Strategy.SMART)
		assert plan.phases[0].worker_names == ["coder", "dev-2"]

	def test_builtin_workers(self, builder):
		from workflow_orchestrator.registry import builtin_descriptor
		workers = [builtin_descriptor(n) for n in ("requirements-agent", "design-agent", "coding-agent")]
		plan = builder.build(MEDIUM, workers, Strategy.SMART)
		assert plan.phase_names == ["requirements_analysis", "system_design", "implementation"]

	def test_build_is_deterministic(self, builder):
		workers = [ANALYST, DESIGNER, CODER, TESTER]
		assert builder.build(MEDIUM, workers) == builder.build(MEDIUM, workers)


class TestDurations:

	def test_tiers(self):
		assert duration_tier(SIMPLE) == "simple"
		assert duration_tier(_profile(ComplexityLevel.COMPLEX)) == "complex"
		assert duration_tier(_profile(ComplexityLevel.COMPLEX, time_sensitivity=1)) == "high"
		assert duration_tier(_profile(ComplexityLevel.MEDIUM, time_sensitivity=1)) == "medium"

	def test_complex_multiplier(self, builder):
		plan = builder.build(_profile(ComplexityLevel.COMPLEX), [ANALYST], Strategy.SMART)
		assert plan.phases[0].estimated_duration == 60
		assert plan.estimated_duration == 90

	def test_high_tier_doubles_smart_phases(self, builder):
		profile = _profile(ComplexityLevel.COMPLEX, time_sensitivity=1)
		plan = builder.build(profile, [ANALYST, CODER], Strategy.SMART)
		assert [p.estimated_duration for p in plan.phases] == [120, 300]
		assert plan.estimated_duration == round(420 * 1.8)


class TestValidatePlan:

	def test_built_plans_are_valid(self, builder):
		for strategy in Strategy:
			plan = builder.build(MEDIUM, [ANALYST, DESIGNER, CODER, TESTER], strategy)
			assert validate_plan(plan) == []

	def test_duplicate_phase(self):
		phase = Phase(name="a", steps=["s"])
		plan = WorkflowPlan(strategy=Strategy.SEQUENTIAL, phases=[phase, phase])
		assert validate_plan(plan) == ["Duplicate phase name: a"]

	def test_unknown_phases(self):
		plan = WorkflowPlan(
			strategy=Strategy.SEQUENTIAL,
			phases=[Phase(name="a"), Phase(name="b")],
			dependencies=[
				Dependency(phase="ghost", depends_on=["a"]),
				Dependency(phase="b", depends_on=["missing"]),
			],
		)
		errors = validate_plan(plan)
		assert "Dependency declared for unknown phase: ghost" in errors
		assert "Phase b depends on unknown phase: missing" in errors

	def test_forward_reference(self):
		plan = make_sequential_plan(["x"], ["y"])
		plan = plan.model_copy(update={"dependencies": [Dependency(phase="phase_1", depends_on=["phase_2"])]})
		assert validate_plan(plan) == ["Phase phase_1 depends on later phase: phase_2"]

	def test_cycle(self):
		plan = WorkflowPlan(
			strategy=Strategy.SMART,
			phases=[Phase(name="a"), Phase(name="b")],
			dependencies=[
				Dependency(phase="a", depends_on=["b"]),
				Dependency(phase="b", depends_on=["a"]),
			],
		)
		errors = validate_plan(plan)
		assert "Phase a depends on later phase: b" in errors
		assert any(e.startswith("Dependency cycle: ") for e in errors)

	def test_self_dependency(self):
		plan = WorkflowPlan(
			strategy=Strategy.SMART,
			phases=[Phase(name="a")],
			dependencies=[Dependency(phase="a", depends_on=["a"])],
		)
		errors = validate_plan(plan)
		assert "Phase a depends on later phase: a" in errors
		assert "Dependency cycle: a -> a" in errors
