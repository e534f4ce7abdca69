"""MCP tool registration - modular tool definitions."""

from typing import Optional

from mcp.server.fastmcp import FastMCP

from ..config import Config
from ..orchestrator import WorkflowOrchestrator
from .analysis import register_analysis_tools
from .core import register_core_tools
from .workers import register_worker_tools
from .workflow import register_workflow_tools


def register_all_tools(
	mcp: FastMCP,
	config: Config,
	orchestrator: Optional[WorkflowOrchestrator] = None,
) -> WorkflowOrchestrator:
	"""Register all MCP tools against one orchestrator instance."""
	orchestrator = orchestrator or WorkflowOrchestrator(config)

	register_core_tools(mcp, orchestrator)
	register_analysis_tools(mcp, orchestrator)
	register_workflow_tools(mcp, orchestrator)
	register_worker_tools(mcp, orchestrator)

	return orchestrator
