"""
Plan Executor - Walks a plan, invoking each phase's steps in order.

Failure handling:
- A failed or timed-out step stops its phase; the run moves on to the next phase.
- Phases depending on a failed phase are still attempted with whatever
  shared context exists.
- The iteration budget counts attempted phases. Reaching it ends the run
  early with a warning; it is never raised.

By default phases run one at a time in plan order. With `parallel_phases`
the executor runs waves of phases whose dependencies were all attempted.
"""

import asyncio
import logging
import time
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from ..errors import PlanValidationError, StepFailure
from ..invokers import StepInvoker
from ..models import (
	ExecutionReport,
	Phase,
	PhaseContext,
	PhaseResult,
	StepOutcome,
	Task,
	WorkflowPlan,
	WorkflowState,
	WorkflowStatus,
)
from .planner import validate_plan

logger = logging.getLogger(__name__)


class PlanExecutor:
	"""Executes one plan per `run` call. Each run owns its WorkflowState."""

	def __init__(
		self,
		invoker: StepInvoker,
		phase_timeout: float = 300.0,
		parallel_phases: bool = False,
	):
		"""
		Initialize the executor.

		Args:
			invoker: Performs individual steps
			phase_timeout: Wall-clock seconds allowed per phase
			parallel_phases: Run independent phases concurrently
		"""
		self.invoker = invoker
		self.phase_timeout = phase_timeout
		self.parallel_phases = parallel_phases

	async def run(self, plan: WorkflowPlan, state: WorkflowState, task: Task) -> ExecutionReport:
		"""
		Execute a plan.

		Args:
			plan: Plan to walk
			state: Fresh run state, mutated in place
			task: Task passed to every step

		Returns:
			ExecutionReport

		Raises:
			PlanValidationError: If the plan's dependencies are invalid
		"""
		errors = validate_plan(plan)
		if errors:
			raise PlanValidationError(errors)

		started = time.monotonic()
		warnings: list[str] = []

		if not plan.phases:
			state.status = WorkflowStatus.FAILED
			state.completed_at = datetime.now().isoformat()
			warnings.append("Plan has no phases; no workers could be resolved for this task")
			logger.warning(f"Workflow {state.id} has an empty plan")
			return self._report(state, [], warnings, started)

		state.status = WorkflowStatus.EXECUTING
		logger.info(
			f"Executing workflow {state.id}: {len(plan.phases)} phases, "
			f"max_iterations={state.max_iterations}"
		)

		lock = asyncio.Lock()
		if self.parallel_phases:
			attempted = await self._run_waves(plan, state, task, lock)
		else:
			attempted = await self._run_in_order(plan, state, task, lock)

		not_attempted = [name for name in plan.phase_names if name not in attempted]
		if not_attempted:
			warnings.append(
				f"Iteration budget of {state.max_iterations} reached; "
				f"{len(not_attempted)} phase(s) not attempted: {', '.join(not_attempted)}"
			)
			logger.warning(f"Workflow {state.id} stopped at iteration {state.current_iteration}")

		state.status = WorkflowStatus.COMPLETED
		state.completed_at = datetime.now().isoformat()
		return self._report(state, not_attempted, warnings, started)

	async def _run_in_order(
		self,
		plan: WorkflowPlan,
		state: WorkflowState,
		task: Task,
		lock: asyncio.Lock,
	) -> set[str]:
		attempted: set[str] = set()
		for phase in plan.phases:
			if state.current_iteration >= state.max_iterations:
				break
			result = await self._attempt_phase(phase, state, task, lock)
			state.phase_results.append(result)
			state.current_iteration += 1
			attempted.add(phase.name)
		return attempted

	async def _run_waves(
		self,
		plan: WorkflowPlan,
		state: WorkflowState,
		task: Task,
		lock: asyncio.Lock,
	) -> set[str]:
		index = {name: i for i, name in enumerate(plan.phase_names)}
		slots: list[PhaseResult | None] = [None] * len(plan.phases)
		attempted: set[str] = set()
		pending = list(plan.phases)

		while pending:
			budget = state.max_iterations - state.current_iteration
			if budget <= 0:
				break
			ready = [
				p for p in pending
				if all(dep in attempted for dep in plan.dependencies_of(p.name))
			]
			if not ready:
				break
			wave = ready[:budget]
			logger.debug(f"Running wave: {[p.name for p in wave]}")

			results = await asyncio.gather(
				*(self._attempt_phase(p, state, task, lock) for p in wave)
			)
			for phase, result in zip(wave, results):
				slots[index[phase.name]] = result
				attempted.add(phase.name)
			state.current_iteration += len(wave)
			pending = [p for p in pending if p.name not in attempted]

		state.phase_results.extend(r for r in slots if r is not None)
		return attempted

	async def _attempt_phase(
		self,
		phase: Phase,
		state: WorkflowState,
		task: Task,
		lock: asyncio.Lock,
	) -> PhaseResult:
		logger.info(f"Executing phase: {phase.name}")
		started = time.monotonic()
		deadline = started + self.phase_timeout
		result = PhaseResult(phase_name=phase.name, workers=phase.worker_names)

		# Earlier phases only; this phase publishes once it is done
		shared = dict(state.shared_context) if state.context_sharing else {}

		for i, step in enumerate(phase.steps):
			context = PhaseContext(
				workflow_id=state.id,
				task=task,
				phase_name=phase.name,
				phase_description=phase.description,
				workers=phase.worker_names,
				step=step,
				step_index=i,
				outputs=dict(result.outputs),
				shared_context=shared,
			)
			outcome = await self._invoke_step(step, context, deadline)
			if not outcome.success:
				result.error = outcome.error or f"Step {step} failed"
				logger.warning(f"Phase {phase.name} failed at step {step}: {result.error}")
				break
			result.completed_steps += 1
			result.outputs[step] = outcome.output or ""

		result.success = result.completed_steps == len(phase.steps)
		result.execution_time_ms = int((time.monotonic() - started) * 1000)

		if result.success and state.context_sharing:
			async with lock:
				state.shared_context[phase.name] = dict(result.outputs)

		logger.info(
			f"Phase {phase.name} finished: {result.completed_steps}/{len(phase.steps)} steps "
			f"in {result.execution_time_ms}ms"
		)
		return result

	async def _invoke_step(self, step: str, context: PhaseContext, deadline: float) -> StepOutcome:
		remaining = deadline - time.monotonic()
		if remaining <= 0:
			return StepOutcome.fail(f"Step {step} not started: phase deadline of {self.phase_timeout}s passed")
		try:
			raw = await asyncio.wait_for(self.invoker.invoke(step, context), timeout=remaining)
		except asyncio.TimeoutError:
			return StepOutcome.fail(f"Step {step} timed out (phase deadline {self.phase_timeout}s)")
		except StepFailure as e:
			return StepOutcome.fail(str(e) or f"Step {step} failed")
		except Exception as e:
			logger.debug(f"Step {step} raised", exc_info=True)
			return StepOutcome.fail(f"Step {step} raised {type(e).__name__}: {e}")
		return self._coerce_outcome(step, raw)

	@staticmethod
	def _coerce_outcome(step: str, raw: Any) -> StepOutcome:
		"""Accept a StepOutcome or a `{success, output, error}` mapping."""
		if isinstance(raw, StepOutcome):
			return raw
		if isinstance(raw, Mapping):
			try:
				return StepOutcome.model_validate(dict(raw))
			except ValidationError as e:
				return StepOutcome.fail(f"Step {step} returned an invalid result: {e.error_count()} validation errors")
		return StepOutcome.fail(f"Step {step} returned {type(raw).__name__}, not a StepOutcome")

	@staticmethod
	def _report(
		state: WorkflowState,
		not_attempted: list[str],
		warnings: list[str],
		started: float,
	) -> ExecutionReport:
		return ExecutionReport(
			workflow_id=state.id,
			status=state.status,
			phase_results=list(state.phase_results),
			iterations_used=state.current_iteration,
			max_iterations=state.max_iterations,
			budget_exhausted=bool(not_attempted),
			phases_not_attempted=not_attempted,
			warnings=warnings,
			shared_context=dict(state.shared_context),
			execution_time_ms=int((time.monotonic() - started) * 1000),
		)
