"""
Workflow Models - Pydantic schemas for task analysis, plans, and run results.

Defines the structure that flows through an orchestration run: the task and
its classification, worker descriptors and recommendations, the phase graph,
the mutable run state, and the consolidated report.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


class ComplexityLevel(str, Enum):
	"""Complexity bucket derived from keyword scoring."""
	SIMPLE = "simple"
	MEDIUM = "medium"
	COMPLEX = "complex"


class Priority(str, Enum):
	"""Priority of a recommendation or phase."""
	HIGH = "high"
	MEDIUM = "medium"
	LOW = "low"

	@property
	def rank(self) -> int:
		return {"high": 3, "medium": 2, "low": 1}[self.value]


class Strategy(str, Enum):
	"""How phases are grouped and ordered in a plan."""
	SEQUENTIAL = "sequential"
	PARALLEL = "parallel"
	SMART = "smart"


class DependencyType(str, Enum):
	"""Kind of edge between two phases."""
	SEQUENTIAL = "sequential"
	PREREQUISITE = "prerequisite"
	VALIDATION = "validation"


class WorkflowStatus(str, Enum):
	"""Lifecycle of a workflow run."""
	INITIALIZING = "initializing"
	EXECUTING = "executing"
	COMPLETED = "completed"
	FAILED = "failed"


class CompletionStatus(str, Enum):
	"""Outcome reported by the consolidator."""
	COMPLETED = "completed"
	PARTIALLY_COMPLETED = "partially_completed"


class DeliverableKind(str, Enum):
	"""Category of a step output."""
	DOCUMENTATION = "documentation"
	DESIGN = "design"
	CODE = "code"
	TESTING = "testing"
	OTHER = "other"


# -- Task analysis --

class Task(BaseModel):
	"""A free-text unit of work submitted for orchestration."""
	model_config = ConfigDict(frozen=True)

	content: str = Field(description="Task description as written by the user")
	complexity_hint: Optional[str] = Field(default=None)
	domain_hint: Optional[str] = Field(default=None)


class ComplexityProfile(BaseModel):
	"""Keyword-scored complexity of a task."""
	model_config = ConfigDict(frozen=True)

	level: ComplexityLevel
	score: float = Field(ge=0)
	factors: dict[str, float] = Field(default_factory=dict)
	confidence: float = Field(ge=0, le=1)
	reasoning: str = Field(default="")


class DomainProfile(BaseModel):
	"""Keyword-scored technical domain of a task."""
	model_config = ConfigDict(frozen=True)

	primary: str
	secondary: Optional[str] = None
	scores: dict[str, int] = Field(default_factory=dict)
	confidence: float = Field(ge=0, le=1)


class RiskFactor(BaseModel):
	"""A risk identified during task analysis."""
	type: str
	level: str
	description: str
	mitigation: str


class ResourceEstimate(BaseModel):
	"""Rough effort estimate for a task and its recommended workers."""
	duration_hours: int
	worker_count: int
	parallel_execution: bool
	critical_path: list[str] = Field(default_factory=list)
	resource_intensity: ComplexityLevel


# -- Workers --

class WorkerDescriptor(BaseModel):
	"""A capability-tagged worker loaded from the registry."""
	model_config = ConfigDict(frozen=True)

	name: str = Field(description="Unique worker name (e.g., 'design-agent')")
	title: str = Field(default="")
	description: str = Field(default="")
	capabilities: list[str] = Field(default_factory=list)
	resource_tier: str = Field(default="standard", description="standard or premium")
	instructions: str = Field(default="")
	version: int = Field(default=1)
	model: Optional[str] = Field(default=None, description="Preferred model, if the worker pins one")
	source_path: str = Field(default="", description="Registry document; empty for built-in workers")

	def matches_any(self, keywords: Iterable[str]) -> bool:
		"""True if the name or any capability contains one of the keywords."""
		haystack = [self.name.lower()] + [c.lower() for c in self.capabilities]
		return any(k in text for k in keywords for text in haystack)


class WorkerSpec(BaseModel):
	"""Request to create a new worker document."""
	name: str
	title: str = ""
	description: str = ""
	capabilities: list[str] = Field(default_factory=list)
	resource_tier: str = "standard"
	instructions: str = ""


class WorkerRecommendation(BaseModel):
	"""A worker chosen for a run, with the reason it was chosen."""
	worker: WorkerDescriptor
	priority: Priority
	reason: str
	confidence: float = Field(ge=0, le=1)


class TaskAnalysis(BaseModel):
	"""Full classifier output for a task."""
	task: Task
	complexity: ComplexityProfile
	domain: DomainProfile
	recommendations: list[WorkerRecommendation] = Field(default_factory=list)
	resource_estimate: Optional[ResourceEstimate] = None
	risks: list[RiskFactor] = Field(default_factory=list)


# -- Plans --

class Phase(BaseModel):
	"""A named unit of the plan with its own steps and workers."""
	model_config = ConfigDict(frozen=True)

	name: str
	description: str = ""
	workers: list[WorkerDescriptor] = Field(default_factory=list)
	priority: Priority = Priority.MEDIUM
	estimated_duration: int = Field(default=60, description="Abstract time units")
	steps: list[str] = Field(default_factory=list)

	@property
	def worker_names(self) -> list[str]:
		return [w.name for w in self.workers]


class Dependency(BaseModel):
	"""Directed edge: `phase` may only start after `depends_on` were attempted."""
	model_config = ConfigDict(frozen=True)

	phase: str
	depends_on: list[str] = Field(default_factory=list)
	type: DependencyType = DependencyType.SEQUENTIAL


class WorkflowPlan(BaseModel):
	"""Phase graph chosen for one task. Immutable once built."""
	model_config = ConfigDict(frozen=True)

	strategy: Strategy
	phases: list[Phase] = Field(default_factory=list)
	dependencies: list[Dependency] = Field(default_factory=list)
	estimated_duration: int = 0

	@property
	def phase_names(self) -> list[str]:
		return [p.name for p in self.phases]

	@property
	def total_steps(self) -> int:
		return sum(len(p.steps) for p in self.phases)

	def dependencies_of(self, phase_name: str) -> list[str]:
		"""All phase names `phase_name` depends on, across every edge type."""
		names: list[str] = []
		for dep in self.dependencies:
			if dep.phase == phase_name:
				names.extend(n for n in dep.depends_on if n not in names)
		return names


# -- Execution --

class StepOutcome(BaseModel):
	"""Result of invoking one step."""
	success: bool
	output: Optional[str] = None
	error: Optional[str] = None

	@classmethod
	def ok(cls, output: str) -> "StepOutcome":
		return cls(success=True, output=output)

	@classmethod
	def fail(cls, error: str) -> "StepOutcome":
		return cls(success=False, error=error)


class PhaseContext(BaseModel):
	"""Everything a step invoker gets to see about the step it runs."""
	workflow_id: str
	task: Task
	phase_name: str
	phase_description: str = ""
	workers: list[str] = Field(default_factory=list)
	step: str
	step_index: int = 0
	outputs: dict[str, str] = Field(default_factory=dict, description="Earlier outputs of this phase")
	shared_context: dict[str, Any] = Field(default_factory=dict)


class PhaseResult(BaseModel):
	"""Outcome of one attempted phase."""
	phase_name: str
	success: bool = False
	completed_steps: int = 0
	outputs: dict[str, str] = Field(default_factory=dict)
	workers: list[str] = Field(default_factory=list)
	error: Optional[str] = None
	execution_time_ms: int = 0


class WorkflowState(BaseModel):
	"""Mutable record of one run, owned by a single executor invocation."""
	id: str
	task: str
	status: WorkflowStatus = WorkflowStatus.INITIALIZING
	strategy: Strategy = Strategy.SMART
	current_iteration: int = 0
	max_iterations: int = 5
	context_sharing: bool = True
	shared_context: dict[str, Any] = Field(default_factory=dict)
	phase_results: list[PhaseResult] = Field(default_factory=list)
	started_at: str = Field(default_factory=lambda: datetime.now().isoformat())
	completed_at: Optional[str] = None


class ExecutionReport(BaseModel):
	"""What the executor hands back once it stops walking the plan."""
	workflow_id: str
	status: WorkflowStatus
	phase_results: list[PhaseResult] = Field(default_factory=list)
	iterations_used: int = 0
	max_iterations: int = 5
	budget_exhausted: bool = False
	phases_not_attempted: list[str] = Field(default_factory=list)
	warnings: list[str] = Field(default_factory=list)
	shared_context: dict[str, Any] = Field(default_factory=dict)
	execution_time_ms: int = 0


# -- Consolidation --

class Deliverable(BaseModel):
	"""One named output of a successful phase."""
	phase: str
	step: str
	kind: DeliverableKind
	content: str
	workers: list[str] = Field(default_factory=list)


class PhaseSummary(BaseModel):
	"""Per-phase line of the final report."""
	phase: str
	status: str
	completed_steps: int
	total_steps: int
	completion_rate: float
	key_deliverables: list[str] = Field(default_factory=list)
	execution_time_ms: int = 0
	error: Optional[str] = None


class QualityMetrics(BaseModel):
	"""Step- and phase-level success figures."""
	overall_success_rate: float = 0.0
	phase_completion_rate: float = 0.0
	successful_steps: int = 0
	failed_steps: int = 0
	total_steps: int = 0
	estimated_duration: int = 0
	actual_duration_ms: int = 0


class ConsolidatedResult(BaseModel):
	"""Aggregated outcome of a run."""
	summary: str = ""
	completion_status: CompletionStatus
	phase_summaries: list[PhaseSummary] = Field(default_factory=list)
	deliverables: list[Deliverable] = Field(default_factory=list)
	quality_metrics: QualityMetrics = Field(default_factory=QualityMetrics)
	recommendations: list[str] = Field(default_factory=list)


# -- Operation requests --

class ClassifyRequest(BaseModel):
	"""Input of the classify operation."""
	task_content: str = ""
	complexity_hint: Optional[str] = None
	domain_hint: Optional[str] = None

	def to_task(self) -> Task:
		return Task(
			content=self.task_content,
			complexity_hint=self.complexity_hint or None,
			domain_hint=self.domain_hint or None,
		)


class SelectWorkersRequest(ClassifyRequest):
	"""Input of the worker selection operation."""
	selected_workers: Optional[list[str]] = None


class BuildPlanRequest(SelectWorkersRequest):
	"""Input of the plan building operation."""
	strategy: Optional[Strategy] = None


class ExecuteRequest(BaseModel):
	"""Input of the execute operation: run an already built plan."""
	task_content: str = ""
	plan: WorkflowPlan
	context_sharing: Optional[bool] = None
	max_iterations: Optional[int] = None


class ConsolidateRequest(BaseModel):
	"""Input of the consolidate operation."""
	plan: WorkflowPlan
	execution: ExecutionReport
	complexity: ComplexityProfile
	domain: Optional[DomainProfile] = None


class ProvisionRequest(ClassifyRequest):
	"""Input of the worker provisioning operation."""


class OrchestrationRequest(BaseModel):
	"""Input of the full pipeline."""
	task_content: str = ""
	worker_directory: Optional[Path] = None
	strategy: Optional[Strategy] = None
	selected_workers: Optional[list[str]] = None
	context_sharing: Optional[bool] = None
	max_iterations: Optional[int] = None
	complexity_hint: Optional[str] = None
	domain_hint: Optional[str] = None


class AnalysisSummary(BaseModel):
	"""Classifier output echoed back in the response."""
	complexity: ComplexityProfile
	domain: DomainProfile


class OrchestrationResponse(BaseModel):
	"""Final report of one orchestration run."""
	workflow_id: str
	status: WorkflowStatus
	agents_used: list[str] = Field(default_factory=list)
	total_phases: int = 0
	execution_time_ms: int = 0
	task_analysis: AnalysisSummary
	results: ConsolidatedResult
	next_steps: list[str] = Field(default_factory=list)
	plan: Optional[WorkflowPlan] = None
	iterations_used: int = 0
	context_sharing_enabled: bool = True
	warnings: list[str] = Field(default_factory=list)
	timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())
