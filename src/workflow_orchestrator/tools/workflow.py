"""Workflow execution and run history MCP tools."""

import json
from typing import Optional

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from ..errors import OrchestratorError
from ..models import (
	ClassifyRequest,
	ConsolidateRequest,
	ExecuteRequest,
	ExecutionReport,
	OrchestrationRequest,
	WorkflowPlan,
)
from ..orchestrator import WorkflowOrchestrator
from .utils import dump, error_response, split_names


def register_workflow_tools(mcp: FastMCP, orchestrator: WorkflowOrchestrator) -> None:
	"""Register execution, consolidation and history tools."""

	@mcp.tool()
	async def orchestrate_task(
		task_content: str,
		strategy: str = "",
		selected_workers: str = "",
		worker_directory: str = "",
		context_sharing: Optional[bool] = None,
		max_iterations: Optional[int] = None,
		complexity_hint: str = "",
		domain_hint: str = "",
	) -> str:
		"""
		Run the full pipeline for a task: analyze, select workers, plan, execute, consolidate.

		Args:
			task_content: Task description (required)
			strategy: sequential, parallel or smart (default from config)
			selected_workers: Comma-separated worker names; overrides automatic selection
			worker_directory: Registry directory to use instead of the configured one
			context_sharing: Share phase outputs with later phases (default from config)
			max_iterations: Maximum number of phases to attempt (default from config)
			complexity_hint: Optional simple, medium or complex
			domain_hint: Optional domain name
		"""
		try:
			response = await orchestrator.orchestrate(OrchestrationRequest(
				task_content=task_content,
				strategy=strategy or None,
				selected_workers=split_names(selected_workers),
				worker_directory=worker_directory or None,
				context_sharing=context_sharing,
				max_iterations=max_iterations,
				complexity_hint=complexity_hint,
				domain_hint=domain_hint,
			))
		except (OrchestratorError, ValidationError) as e:
			return error_response(e)
		return dump(response)

	@mcp.tool()
	async def execute_workflow(
		task_content: str,
		plan_json: str,
		context_sharing: Optional[bool] = None,
		max_iterations: Optional[int] = None,
	) -> str:
		"""
		Execute a workflow plan produced by build_workflow_plan.

		Args:
			task_content: Task description the plan was built for
			plan_json: The plan as JSON
			context_sharing: Share phase outputs with later phases (default from config)
			max_iterations: Maximum number of phases to attempt (default from config)
		"""
		try:
			report = await orchestrator.execute(ExecuteRequest(
				task_content=task_content,
				plan=WorkflowPlan.model_validate_json(plan_json),
				context_sharing=context_sharing,
				max_iterations=max_iterations,
			))
		except (OrchestratorError, ValidationError) as e:
			return error_response(e)
		return dump(report)

	@mcp.tool()
	async def consolidate_workflow(
		task_content: str,
		plan_json: str,
		execution_json: str,
		complexity_hint: str = "",
		domain_hint: str = "",
	) -> str:
		"""
		Consolidate an execution report into deliverables, metrics and recommendations.

		Pass the same hints given to build_workflow_plan so the task is
		classified the way the plan was.

		Args:
			task_content: Task description, used to classify complexity
			plan_json: The executed plan as JSON
			execution_json: The report returned by execute_workflow
			complexity_hint: Optional simple, medium or complex
			domain_hint: Optional domain name
		"""
		try:
			analysis = orchestrator.classify(ClassifyRequest(
				task_content=task_content,
				complexity_hint=complexity_hint,
				domain_hint=domain_hint,
			))
			result = orchestrator.consolidate(ConsolidateRequest(
				plan=WorkflowPlan.model_validate_json(plan_json),
				execution=ExecutionReport.model_validate_json(execution_json),
				complexity=analysis.complexity,
				domain=analysis.domain,
			))
		except (OrchestratorError, ValidationError) as e:
			return error_response(e)
		return dump(result)

	@mcp.tool()
	async def list_workflow_runs(
		status: str = "",
		since: str = "",
		limit: int = 20,
	) -> str:
		"""
		List archived workflow runs, newest first.

		Args:
			status: Filter by run status (completed, failed)
			since: ISO timestamp lower bound
			limit: Maximum number of runs
		"""
		runs = orchestrator.list_runs(status=status or None, since=since or None, limit=limit)
		return json.dumps({
			"runs": [r.to_dict() for r in runs],
			"count": len(runs),
		}, indent=2)

	@mcp.tool()
	async def get_workflow_run(workflow_id: str) -> str:
		"""
		Get an archived workflow run with its full report.

		Args:
			workflow_id: Workflow ID returned by orchestrate_task
		"""
		record = orchestrator.get_run(workflow_id)
		if not record:
			return json.dumps({"error": f"Workflow run {workflow_id} not found"})
		return json.dumps(record.to_dict(include_report=True), indent=2)
