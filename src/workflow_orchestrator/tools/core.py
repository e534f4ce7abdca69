"""Core health check tool."""

import json

from mcp.server.fastmcp import FastMCP

from ..orchestrator import WorkflowOrchestrator


def register_core_tools(mcp: FastMCP, orchestrator: WorkflowOrchestrator) -> None:
	"""Register core tools."""
	config = orchestrator.config

	@mcp.tool()
	async def health_check() -> str:
		"""
		Check the health of the workflow-orchestrator server.
		Returns configuration and registry status.
		"""
		workers = orchestrator.registry.discover(reload=True)
		status = {
			"server": "running",
			"config_dir": str(config.config_dir),
			"data_dir": str(config.data_dir),
			"worker_directory": str(config.worker_directory),
			"worker_directory_exists": config.worker_directory.is_dir(),
			"workers_available": len(workers),
			"invalid_worker_files": len(orchestrator.registry.invalid_files),
			"default_strategy": config.strategy.value,
			"max_iterations": config.max_iterations,
			"runs_db_exists": config.runs_db_path.exists(),
		}
		return json.dumps(status, indent=2)
