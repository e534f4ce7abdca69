"""Task analysis and planning tools."""

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from ..errors import OrchestratorError
from ..models import BuildPlanRequest, ClassifyRequest, SelectWorkersRequest
from ..orchestrator import WorkflowOrchestrator
from .utils import dump, error_response, split_names


def register_analysis_tools(mcp: FastMCP, orchestrator: WorkflowOrchestrator) -> None:
	"""Register classification, worker selection and plan building tools."""

	@mcp.tool()
	async def analyze_task(
		task_content: str,
		complexity_hint: str = "",
		domain_hint: str = "",
	) -> str:
		"""
		Analyze a task: complexity, domain, recommended workers, effort and risks.

		Args:
			task_content: Task description
			complexity_hint: Optional simple, medium or complex
			domain_hint: Optional domain name (e.g., web-development)
		"""
		try:
			analysis = orchestrator.classify(ClassifyRequest(
				task_content=task_content,
				complexity_hint=complexity_hint,
				domain_hint=domain_hint,
			))
		except (OrchestratorError, ValidationError) as e:
			return error_response(e)
		return dump(analysis)

	@mcp.tool()
	async def select_workers(
		task_content: str,
		selected_workers: str = "",
		complexity_hint: str = "",
		domain_hint: str = "",
	) -> str:
		"""
		Rank the workers for a task. Explicit names replace the heuristics.

		Args:
			task_content: Task description
			selected_workers: Comma-separated worker names (optional)
			complexity_hint: Optional simple, medium or complex
			domain_hint: Optional domain name
		"""
		try:
			recommendations = orchestrator.select_workers(SelectWorkersRequest(
				task_content=task_content,
				selected_workers=split_names(selected_workers),
				complexity_hint=complexity_hint,
				domain_hint=domain_hint,
			))
		except (OrchestratorError, ValidationError) as e:
			return error_response(e)
		return dump({
			"recommendations": [r.model_dump(mode="json") for r in recommendations],
			"count": len(recommendations),
		})

	@mcp.tool()
	async def build_workflow_plan(
		task_content: str,
		strategy: str = "",
		selected_workers: str = "",
		complexity_hint: str = "",
		domain_hint: str = "",
	) -> str:
		"""
		Build a workflow plan for a task without executing it.

		The returned plan can be passed to execute_workflow.

		Args:
			task_content: Task description
			strategy: sequential, parallel or smart (default from config)
			selected_workers: Comma-separated worker names (optional)
			complexity_hint: Optional simple, medium or complex
			domain_hint: Optional domain name
		"""
		try:
			plan = orchestrator.build_plan(BuildPlanRequest(
				task_content=task_content,
				strategy=strategy or None,
				selected_workers=split_names(selected_workers),
				complexity_hint=complexity_hint,
				domain_hint=domain_hint,
			))
		except (OrchestratorError, ValidationError) as e:
			return error_response(e)
		return dump(plan)

