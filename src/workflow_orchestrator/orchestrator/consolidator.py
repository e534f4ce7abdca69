"""
Result Consolidator - Turns phase results into the final report.

Step accounting is against the plan, not just the attempted phases: steps
of phases that failed early or were never attempted count as failed.
"""

import logging
from typing import Optional

from ..models import (
	CompletionStatus,
	ComplexityLevel,
	ComplexityProfile,
	ConsolidatedResult,
	Deliverable,
	DeliverableKind,
	DomainProfile,
	ExecutionReport,
	PhaseResult,
	PhaseSummary,
	QualityMetrics,
	WorkflowPlan,
)
from ..templates import deliverable_kind

logger = logging.getLogger(__name__)

LOW_SUCCESS_RATE = 0.8

REVIEW_FAILURES = "Review failed steps and consider additional resources or different approach"
BREAK_DOWN = "Consider breaking down complex tasks into smaller, manageable steps"
NO_WORKERS = (
	"No workers could be resolved for this task; "
	"initialize the standard workers or name existing workers explicitly"
)
COMPLEX_CHECKPOINTS = "For complex tasks, implement in phases with regular checkpoints"
COMPLEX_TESTING = "Ensure adequate testing and validation at each phase"


class ResultConsolidator:
	"""Aggregates an execution report into a ConsolidatedResult."""

	def consolidate(
		self,
		plan: WorkflowPlan,
		execution: ExecutionReport,
		complexity: ComplexityProfile,
	) -> ConsolidatedResult:
		results = {r.phase_name: r for r in execution.phase_results}

		summaries = [
			_phase_summary(phase.name, len(phase.steps), results.get(phase.name))
			for phase in plan.phases
		]
		deliverables = [
			Deliverable(
				phase=result.phase_name,
				step=step,
				kind=deliverable_kind(step),
				content=content,
				workers=list(result.workers),
			)
			for result in execution.phase_results if result.success
			for step, content in result.outputs.items()
		]

		successful = sum(r.completed_steps for r in execution.phase_results)
		total = plan.total_steps
		failed = max(total - successful, 0)
		attempted = len(execution.phase_results)
		succeeded_phases = sum(1 for r in execution.phase_results if r.success)

		metrics = QualityMetrics(
			overall_success_rate=_ratio(successful, successful + failed),
			phase_completion_rate=_ratio(succeeded_phases, len(plan.phases)),
			successful_steps=successful,
			failed_steps=failed,
			total_steps=total,
			estimated_duration=plan.estimated_duration,
			actual_duration_ms=execution.execution_time_ms,
		)

		status = (
			CompletionStatus.COMPLETED
			if failed == 0 and attempted > 0
			else CompletionStatus.PARTIALLY_COMPLETED
		)

		result = ConsolidatedResult(
			summary=(
				f"Workflow execution finished with {successful} of {total} steps "
				f"completed across {attempted} of {len(plan.phases)} phases"
			),
			completion_status=status,
			phase_summaries=summaries,
			deliverables=deliverables,
			quality_metrics=metrics,
			recommendations=self.recommend(plan, execution, complexity, metrics),
		)
		logger.debug(f"Consolidated {execution.workflow_id}: {status.value}, rate={metrics.overall_success_rate}")
		return result

	def recommend(
		self,
		plan: WorkflowPlan,
		execution: ExecutionReport,
		complexity: ComplexityProfile,
		metrics: QualityMetrics,
	) -> list[str]:
		"""Fixed rule table over the run's outcome."""
		if not execution.phase_results:
			return [NO_WORKERS]

		recommendations: list[str] = []

		if metrics.failed_steps > 0:
			recommendations.append(REVIEW_FAILURES)

		if metrics.total_steps and metrics.overall_success_rate < LOW_SUCCESS_RATE:
			recommendations.append(BREAK_DOWN)

		if execution.budget_exhausted:
			recommendations.append(
				f"Iteration budget exhausted after {execution.iterations_used} of "
				f"{len(plan.phases)} phases (max_iterations={execution.max_iterations}); "
				f"{len(execution.phases_not_attempted)} phase(s) not attempted. "
				"Raise max_iterations or split the task"
			)

		if complexity.level == ComplexityLevel.COMPLEX:
			recommendations.append(COMPLEX_CHECKPOINTS)
			recommendations.append(COMPLEX_TESTING)
			if not any(deliverable_kind(step) == DeliverableKind.TESTING for p in plan.phases for step in p.steps):
				recommendations.append("Add a testing and validation phase before delivery")
			for result in execution.phase_results:
				if not result.success:
					recommendations.append(
						f"Re-run phase {result.phase_name} with a checkpoint after each step"
					)

		return recommendations


def next_steps(completion_status: CompletionStatus, domain: Optional[DomainProfile]) -> list[str]:
	"""Follow-up actions for the caller once a run is reported."""
	if completion_status == CompletionStatus.COMPLETED:
		steps = [
			"Review deliverables for quality and completeness",
			"Plan deployment or next phase implementation",
			"Document lessons learned and best practices",
		]
	else:
		steps = [
			"Address failed or incomplete phases",
			"Re-evaluate resource allocation and timeline",
			"Consider alternative approaches for challenging areas",
		]

	if domain is not None and any(
		d and ("web" in d or "frontend" in d) for d in (domain.primary, domain.secondary)
	):
		steps.append("Conduct user acceptance testing")
		steps.append("Optimize for performance and accessibility")

	return steps


def _phase_summary(name: str, total_steps: int, result: Optional[PhaseResult]) -> PhaseSummary:
	if result is None:
		return PhaseSummary(
			phase=name,
			status="not_attempted",
			completed_steps=0,
			total_steps=total_steps,
			completion_rate=0.0,
		)
	return PhaseSummary(
		phase=name,
		status="completed" if result.success else "failed",
		completed_steps=result.completed_steps,
		total_steps=total_steps,
		completion_rate=_ratio(result.completed_steps, total_steps) if total_steps else 1.0,
		key_deliverables=list(result.outputs),
		execution_time_ms=result.execution_time_ms,
		error=result.error,
	)


def _ratio(numerator: int, denominator: int) -> float:
	if denominator <= 0:
		return 0.0
	return round(numerator / denominator, 4)
