"""Worker registry MCP tools."""

import json

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from ..errors import OrchestratorError
from ..models import ProvisionRequest, WorkerSpec
from ..orchestrator import WorkflowOrchestrator
from .utils import dump, error_response, split_names


def register_worker_tools(mcp: FastMCP, orchestrator: WorkflowOrchestrator) -> None:
	"""Register worker registry tools."""

	@mcp.tool()
	async def list_workers(capability: str = "") -> str:
		"""
		List workers in the registry directory.

		Args:
			capability: Optional capability filter (substring, case-insensitive)
		"""
		orchestrator.registry.discover(reload=True)
		workers = orchestrator.list_workers(capability or None)
		return json.dumps({
			"worker_directory": str(orchestrator.registry.directory),
			"workers": [
				{
					"name": w.name,
					"title": w.title,
					"description": w.description,
					"capabilities": w.capabilities,
					"resource_tier": w.resource_tier,
					"path": w.source_path,
				}
				for w in workers
			],
			"count": len(workers),
			"invalid_files": [
				{"file": f.file, "error": f.error}
				for f in orchestrator.registry.invalid_files
			],
		}, indent=2)

	@mcp.tool()
	async def create_worker(
		name: str,
		capabilities: str = "",
		title: str = "",
		description: str = "",
		resource_tier: str = "standard",
		instructions: str = "",
	) -> str:
		"""
		Create a new worker document. Fails if the name already exists.

		Args:
			name: Worker name (lowercase letters, digits, '-' or '_')
			capabilities: Comma-separated capability tags
			title: Role title
			description: One-line description
			resource_tier: standard or premium
			instructions: Instructions block; generated from capabilities if empty
		"""
		try:
			worker = orchestrator.create_worker(WorkerSpec(
				name=name,
				capabilities=split_names(capabilities) or [],
				title=title,
				description=description,
				resource_tier=resource_tier,
				instructions=instructions,
			))
		except (OrchestratorError, ValidationError) as e:
			return error_response(e)
		return json.dumps({
			"success": True,
			"worker": worker.name,
			"path": worker.source_path,
		}, indent=2)

	@mcp.tool()
	async def init_standard_workers() -> str:
		"""
		Create the standard worker set (requirements, design, coding, test,
		tasks, spec) in the registry directory. Existing workers are kept.
		"""
		try:
			result = orchestrator.init_standard_workers()
		except OrchestratorError as e:
			return error_response(e)
		return json.dumps({
			"worker_directory": str(orchestrator.registry.directory),
			**result,
		}, indent=2)

	@mcp.tool()
	async def provision_workers(
		task_content: str,
		complexity_hint: str = "",
		domain_hint: str = "",
	) -> str:
		"""
		Create registry documents for the workers recommended for a task
		that are not in the registry yet.

		Args:
			task_content: Task description
			complexity_hint: Optional simple, medium or complex
			domain_hint: Optional domain name
		"""
		try:
			result = orchestrator.provision_workers(ProvisionRequest(
				task_content=task_content,
				complexity_hint=complexity_hint,
				domain_hint=domain_hint,
			))
		except (OrchestratorError, ValidationError) as e:
			return error_response(e)
		return dump(result)
