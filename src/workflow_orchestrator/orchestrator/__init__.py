"""Orchestrator module - Classification, selection, planning, execution, consolidation."""

from .classifier import TaskClassifier, assess_risks, estimate_resources
from .consolidator import ResultConsolidator, next_steps
from .engine import WorkflowOrchestrator, new_workflow_id
from .executor import PlanExecutor
from .planner import PlanBuilder, validate_plan
from .selector import WorkerSelector

__all__ = [
	"TaskClassifier",
	"assess_risks",
	"estimate_resources",
	"WorkerSelector",
	"PlanBuilder",
	"validate_plan",
	"PlanExecutor",
	"ResultConsolidator",
	"next_steps",
	"WorkflowOrchestrator",
	"new_workflow_id",
]
