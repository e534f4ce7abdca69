"""
Workflow Orchestrator - One entry point per public operation.

Wires the classifier, selector, plan builder, executor and consolidator
together around an explicit Config. Every operation takes its own request
model; `orchestrate` runs the whole pipeline and archives the result.
"""

import logging
import secrets
import sqlite3
import time
from pathlib import Path
from typing import Optional

from ..config import Config
from ..errors import InputError, RegistryConflict, RegistryError
from ..history import RunRecord, RunStore
from ..invokers import StepInvoker, TemplateStepInvoker
from ..models import (
	AnalysisSummary,
	BuildPlanRequest,
	ClassifyRequest,
	ConsolidatedResult,
	ConsolidateRequest,
	ExecuteRequest,
	ExecutionReport,
	OrchestrationRequest,
	OrchestrationResponse,
	ProvisionRequest,
	SelectWorkersRequest,
	Task,
	TaskAnalysis,
	WorkerDescriptor,
	WorkerRecommendation,
	WorkerSpec,
	WorkflowPlan,
	WorkflowState,
	WorkflowStatus,
)
from ..registry import WorkerRegistry
from ..registry.catalog import get_standard_spec
from .classifier import TaskClassifier, assess_risks, estimate_resources
from .consolidator import ResultConsolidator, next_steps
from .executor import PlanExecutor
from .planner import PlanBuilder
from .selector import WorkerSelector

logger = logging.getLogger(__name__)


def new_workflow_id() -> str:
	return f"wf_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


class WorkflowOrchestrator:
	"""
	Task-to-workflow orchestration engine.

	Args:
		config: Explicit configuration; nothing is resolved from globals
		registry: Worker registry; defaults to config.worker_directory
		invoker: Step invoker; defaults to the template renderer
		run_store: Run archive; defaults to config.runs_db_path when archiving is on
	"""

	def __init__(
		self,
		config: Config,
		registry: Optional[WorkerRegistry] = None,
		invoker: Optional[StepInvoker] = None,
		run_store: Optional[RunStore] = None,
	):
		self.config = config
		self.registry = registry or WorkerRegistry(config.worker_directory)
		self.invoker = invoker or TemplateStepInvoker()
		self._run_store = run_store
		self.classifier = TaskClassifier()
		self.planner = PlanBuilder()
		self.consolidator = ResultConsolidator()

	@property
	def run_store(self) -> Optional[RunStore]:
		if self._run_store is None and self.config.archive_runs:
			self._run_store = RunStore(self.config.runs_db_path)
		return self._run_store

	def _registry_for(self, directory: Optional[Path]) -> WorkerRegistry:
		if directory is None or Path(directory) == self.registry.directory:
			return self.registry
		return WorkerRegistry(directory)

	def _executor(self) -> PlanExecutor:
		return PlanExecutor(
			self.invoker,
			phase_timeout=self.config.phase_timeout,
			parallel_phases=self.config.parallel_phases,
		)

	@staticmethod
	def _require_task(task_content: str) -> None:
		if not task_content or not task_content.strip():
			raise InputError("task_content is required")

	def _iteration_budget(self, max_iterations: Optional[int]) -> int:
		budget = self.config.max_iterations if max_iterations is None else max_iterations
		if budget < 1:
			raise InputError(f"max_iterations must be >= 1, got {budget}")
		return budget

	# -- Analysis and planning --

	def classify(self, request: ClassifyRequest) -> TaskAnalysis:
		"""Classify a task and recommend workers for it."""
		self._require_task(request.task_content)
		task = request.to_task()
		complexity, domain = self.classifier.classify(task)
		recommendations = WorkerSelector(self.registry).recommend(task, complexity, domain)
		return TaskAnalysis(
			task=task,
			complexity=complexity,
			domain=domain,
			recommendations=recommendations,
			resource_estimate=estimate_resources(complexity, recommendations),
			risks=assess_risks(complexity),
		)

	def select_workers(self, request: SelectWorkersRequest) -> list[WorkerRecommendation]:
		"""Rank workers for a task; explicit names override the heuristics."""
		self._require_task(request.task_content)
		task = request.to_task()
		complexity, domain = self.classifier.classify(task)
		return WorkerSelector(self.registry).select(task, complexity, domain, request.selected_workers)

	def build_plan(self, request: BuildPlanRequest) -> WorkflowPlan:
		"""Classify, select and build a plan without executing it."""
		self._require_task(request.task_content)
		task = request.to_task()
		complexity, domain = self.classifier.classify(task)
		recommendations = WorkerSelector(self.registry).select(
			task, complexity, domain, request.selected_workers,
		)
		return self.planner.build(
			complexity,
			[r.worker for r in recommendations],
			request.strategy or self.config.strategy,
		)

	# -- Execution --

	async def execute(self, request: ExecuteRequest) -> ExecutionReport:
		"""
		Execute a caller-supplied plan.

		Raises:
			InputError: Missing task content or a bad iteration budget
			PlanValidationError: If the plan's dependencies are invalid
		"""
		self._require_task(request.task_content)
		state = WorkflowState(
			id=new_workflow_id(),
			task=request.task_content,
			strategy=request.plan.strategy,
			max_iterations=self._iteration_budget(request.max_iterations),
			context_sharing=(
				self.config.context_sharing if request.context_sharing is None else request.context_sharing
			),
		)
		return await self._executor().run(request.plan, state, Task(content=request.task_content))

	def consolidate(self, request: ConsolidateRequest) -> ConsolidatedResult:
		"""Aggregate an execution report."""
		return self.consolidator.consolidate(request.plan, request.execution, request.complexity)

	async def orchestrate(self, request: OrchestrationRequest) -> OrchestrationResponse:
		"""
		Run the full pipeline: classify, select, plan, execute, consolidate.

		Raises:
			InputError: Missing task content or a bad iteration budget
		"""
		self._require_task(request.task_content)
		max_iterations = self._iteration_budget(request.max_iterations)
		started = time.monotonic()

		task = Task(
			content=request.task_content,
			complexity_hint=request.complexity_hint or None,
			domain_hint=request.domain_hint or None,
		)
		registry = self._registry_for(request.worker_directory)
		strategy = request.strategy or self.config.strategy
		context_sharing = (
			self.config.context_sharing if request.context_sharing is None else request.context_sharing
		)

		complexity, domain = self.classifier.classify(task)
		recommendations = WorkerSelector(registry).select(
			task, complexity, domain, request.selected_workers,
		)
		plan = self.planner.build(complexity, [r.worker for r in recommendations], strategy)

		state = WorkflowState(
			id=new_workflow_id(),
			task=task.content,
			strategy=strategy,
			max_iterations=max_iterations,
			context_sharing=context_sharing,
		)
		logger.info(
			f"Orchestrating {state.id}: {complexity.level.value} task, "
			f"{len(recommendations)} workers, {len(plan.phases)} phases ({strategy.value})"
		)

		execution = await self._executor().run(plan, state, task)
		results = self.consolidator.consolidate(plan, execution, complexity)

		agents_used: list[str] = []
		for phase in plan.phases:
			for name in phase.worker_names:
				if name not in agents_used:
					agents_used.append(name)

		response = OrchestrationResponse(
			workflow_id=state.id,
			status=execution.status,
			agents_used=agents_used,
			total_phases=len(plan.phases),
			execution_time_ms=int((time.monotonic() - started) * 1000),
			task_analysis=AnalysisSummary(complexity=complexity, domain=domain),
			results=results,
			next_steps=next_steps(results.completion_status, domain),
			plan=plan,
			iterations_used=execution.iterations_used,
			context_sharing_enabled=context_sharing,
			warnings=execution.warnings,
		)
		logger.info(
			f"Workflow {state.id} {response.status.value}: "
			f"{results.completion_status.value} in {response.execution_time_ms}ms"
		)

		self._archive(task.content, response)
		return response

	def _archive(self, task: str, response: OrchestrationResponse) -> None:
		if response.status not in (WorkflowStatus.COMPLETED, WorkflowStatus.FAILED):
			return
		try:
			store = self.run_store
			if store is not None:
				store.record(RunRecord.from_response(task, response))
		except (sqlite3.Error, OSError) as e:
			logger.warning(f"Failed to archive workflow {response.workflow_id}: {e}")

	# -- Registry --

	def list_workers(self, capability: Optional[str] = None) -> list[WorkerDescriptor]:
		return self.registry.list_workers(capability)

	def create_worker(self, spec: WorkerSpec) -> WorkerDescriptor:
		return self.registry.create_worker(spec)

	def init_standard_workers(self) -> dict[str, list[str]]:
		return self.registry.init_standard_workers()

	def provision_workers(self, request: ProvisionRequest) -> dict[str, list]:
		"""
		Create registry documents for recommended workers that only exist as built-ins.

		Returns:
			Dict with `created`, `existing` and `failed` entries
		"""
		analysis = self.classify(request)
		created: list[str] = []
		existing: list[str] = []
		failed: list[dict[str, str]] = []

		for rec in analysis.recommendations:
			name = rec.worker.name
			if self.registry.get_worker(name) is not None:
				existing.append(name)
				continue
			spec = get_standard_spec(name)
			if spec is None:
				failed.append({"name": name, "error": "No standard definition for this worker"})
				continue
			try:
				self.registry.create_worker(spec)
				created.append(name)
			except RegistryConflict:
				existing.append(name)
			except RegistryError as e:
				failed.append({"name": name, "error": str(e)})

		logger.info(f"Provisioned workers: created={created}, existing={existing}")
		return {"created": created, "existing": existing, "failed": failed}

	# -- History --

	def list_runs(
		self,
		status: Optional[str] = None,
		since: Optional[str] = None,
		limit: int = 20,
	) -> list[RunRecord]:
		store = self.run_store
		if store is None:
			return []
		return store.query(status=status, since=since, limit=limit)

	def get_run(self, workflow_id: str) -> Optional[RunRecord]:
		store = self.run_store
		if store is None:
			return None
		return store.get(workflow_id)
