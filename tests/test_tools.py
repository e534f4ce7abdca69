"""Tests for the MCP tool handlers."""

import json
from pathlib import Path

import pytest

from workflow_orchestrator.orchestrator import WorkflowOrchestrator
from workflow_orchestrator.orchestrator.consolidator import COMPLEX_CHECKPOINTS
from workflow_orchestrator.tools.analysis import register_analysis_tools
from workflow_orchestrator.tools.core import register_core_tools
from workflow_orchestrator.tools.utils import split_names
from workflow_orchestrator.tools.workers import register_worker_tools
from workflow_orchestrator.tools.workflow import register_workflow_tools

from .helpers import RecordingInvoker, capture_tools, make_config


@pytest.fixture
def orchestrator(tmp_path: Path) -> WorkflowOrchestrator:
	return WorkflowOrchestrator(make_config(tmp_path), invoker=RecordingInvoker(fail={"execute_design_agent_tasks"}))


@pytest.fixture
def analysis_tools(orchestrator):
	return capture_tools(orchestrator, register_analysis_tools)


@pytest.fixture
def workflow_tools(orchestrator):
	return capture_tools(orchestrator, register_workflow_tools)


@pytest.fixture
def worker_tools(orchestrator):
	return capture_tools(orchestrator, register_worker_tools)


def test_split_names():
	assert split_names("a, b,,c ") == ["a", "b", "c"]
	assert split_names("") is None
	assert split_names(" , ") is None


class TestCoreTools:

	@pytest.mark.asyncio
	async def test_health_check(self, orchestrator):
		tools = capture_tools(orchestrator, register_core_tools)
		status = json.loads(await tools["health_check"]())
		assert status["server"] == "running"
		assert status["workers_available"] == 0
		assert status["default_strategy"] == "smart"
		assert status["max_iterations"] == 5


class TestAnalysisTools:

	@pytest.mark.asyncio
	async def test_analyze_task(self, analysis_tools):
		result = json.loads(await analysis_tools["analyze_task"](task_content="Build a login page"))
		assert result["complexity"]["level"] == "simple"
		assert [r["worker"]["name"] for r in result["recommendations"]] == ["requirements-agent"]
		assert result["resource_estimate"]["worker_count"] == 1

	@pytest.mark.asyncio
	async def test_analyze_task_requires_content(self, analysis_tools):
		result = json.loads(await analysis_tools["analyze_task"](task_content=""))
		assert result["error"] == "task_content is required"

	@pytest.mark.asyncio
	async def test_select_workers_fallback(self, analysis_tools):
		result = json.loads(await analysis_tools["select_workers"](
			task_content="anything",
			selected_workers="nonexistent-worker",
		))
		assert result["count"] == 3
		assert result["recommendations"][0]["worker"]["name"] == "requirements-agent"

	@pytest.mark.asyncio
	async def test_build_plan(self, analysis_tools):
		plan = json.loads(await analysis_tools["build_workflow_plan"](
			task_content="Build a login page",
			strategy="sequential",
		))
		assert plan["strategy"] == "sequential"
		assert plan["phases"][0]["name"] == "phase_1_requirements-agent"

	@pytest.mark.asyncio
	async def test_build_plan_bad_strategy(self, analysis_tools):
		result = json.loads(await analysis_tools["build_workflow_plan"](
			task_content="Build a login page",
			strategy="round-robin",
		))
		assert result["error"] == "Invalid request"
		assert any(d.startswith("strategy") for d in result["details"])


class TestWorkflowTools:

	@pytest.mark.asyncio
	async def test_orchestrate_task(self, workflow_tools):
		result = json.loads(await workflow_tools["orchestrate_task"](
			task_content="Build a login page",
			selected_workers="nonexistent-worker",
			strategy="sequential",
		))
		assert result["status"] == "completed"
		assert result["results"]["completion_status"] == "partially_completed"
		assert [s["status"] for s in result["results"]["phase_summaries"]] == ["completed", "failed", "completed"]

	@pytest.mark.asyncio
	async def test_orchestrate_task_budget(self, workflow_tools):
		result = json.loads(await workflow_tools["orchestrate_task"](
			task_content="Build a login page",
			selected_workers="nonexistent-worker",
			max_iterations=1,
		))
		assert result["iterations_used"] == 1
		assert any("Iteration budget exhausted" in r for r in result["results"]["recommendations"])

	@pytest.mark.asyncio
	async def test_orchestrate_task_bad_budget(self, workflow_tools):
		result = json.loads(await workflow_tools["orchestrate_task"](task_content="x", max_iterations=0))
		assert "max_iterations" in result["error"]

	@pytest.mark.asyncio
	async def test_plan_execute_consolidate(self, analysis_tools, workflow_tools):
		plan_json = await analysis_tools["build_workflow_plan"](task_content="Build a login page")
		execution_json = await workflow_tools["execute_workflow"](
			task_content="Build a login page",
			plan_json=plan_json,
		)
		execution = json.loads(execution_json)
		assert execution["status"] == "completed"
		assert execution["phase_results"][0]["phase_name"] == "requirements_analysis"

		result = json.loads(await workflow_tools["consolidate_workflow"](
			task_content="Build a login page",
			plan_json=plan_json,
			execution_json=execution_json,
		))
		assert result["completion_status"] == "completed"
		assert result["quality_metrics"]["successful_steps"] == 3

	@pytest.mark.asyncio
	async def test_execute_rejects_invalid_plan(self, workflow_tools):
		plan = {
			"strategy": "smart",
			"phases": [{"name": "a", "steps": ["s"]}],
			"dependencies": [{"phase": "a", "depends_on": ["b"]}],
		}
		result = json.loads(await workflow_tools["execute_workflow"](
			task_content="x",
			plan_json=json.dumps(plan),
		))
		assert result["error"].startswith("Invalid workflow plan")
		assert result["details"] == ["Phase a depends on unknown phase: b"]

	@pytest.mark.asyncio
	async def test_consolidate_uses_complexity_hint(self, analysis_tools, workflow_tools):
		task = "Build a REST api backed by a database"
		plan_json = await analysis_tools["build_workflow_plan"](task_content=task, complexity_hint="complex")
		execution_json = await workflow_tools["execute_workflow"](task_content=task, plan_json=plan_json)

		hinted = json.loads(await workflow_tools["consolidate_workflow"](
			task_content=task,
			plan_json=plan_json,
			execution_json=execution_json,
			complexity_hint="complex",
		))
		unhinted = json.loads(await workflow_tools["consolidate_workflow"](
			task_content=task,
			plan_json=plan_json,
			execution_json=execution_json,
		))

		assert COMPLEX_CHECKPOINTS in hinted["recommendations"]
		assert COMPLEX_CHECKPOINTS not in unhinted["recommendations"]

	@pytest.mark.asyncio
	async def test_execute_rejects_malformed_json(self, workflow_tools):
		result = json.loads(await workflow_tools["execute_workflow"](task_content="x", plan_json="{not json"))
		assert result["error"] == "Invalid request"

	@pytest.mark.asyncio
	async def test_run_history(self, workflow_tools):
		response = json.loads(await workflow_tools["orchestrate_task"](task_content="Build a login page"))

		runs = json.loads(await workflow_tools["list_workflow_runs"]())
		assert runs["count"] == 1
		assert runs["runs"][0]["workflow_id"] == response["workflow_id"]

		detail = json.loads(await workflow_tools["get_workflow_run"](workflow_id=response["workflow_id"]))
		assert detail["report"]["workflow_id"] == response["workflow_id"]

		missing = json.loads(await workflow_tools["get_workflow_run"](workflow_id="wf_nope"))
		assert missing == {"error": "Workflow run wf_nope not found"}


class TestWorkerTools:

	@pytest.mark.asyncio
	async def test_create_and_list(self, worker_tools):
		created = json.loads(await worker_tools["create_worker"](
			name="api-designer",
			capabilities="api-design, openapi",
			instructions="Design APIs.",
		))
		assert created["success"] is True
		assert created["path"].endswith("api-designer.yaml")

		listed = json.loads(await worker_tools["list_workers"](capability="openapi"))
		assert listed["count"] == 1
		assert listed["workers"][0]["capabilities"] == ["api-design", "openapi"]

	@pytest.mark.asyncio
	async def test_create_conflict(self, worker_tools):
		await worker_tools["create_worker"](name="dup", instructions="x")
		result = json.loads(await worker_tools["create_worker"](name="dup", instructions="y"))
		assert result["error"] == "Worker 'dup' already exists"

	@pytest.mark.asyncio
	async def test_list_reports_invalid_files(self, orchestrator, worker_tools):
		orchestrator.registry.directory.mkdir(parents=True, exist_ok=True)
		(orchestrator.registry.directory / "bad.yaml").write_text("- not a mapping\n")
		listed = json.loads(await worker_tools["list_workers"]())
		assert listed["count"] == 0
		assert listed["invalid_files"][0]["file"] == "bad.yaml"

	@pytest.mark.asyncio
	async def test_init_and_provision(self, worker_tools):
		init = json.loads(await worker_tools["init_standard_workers"]())
		assert len(init["created"]) == 6

		provisioned = json.loads(await worker_tools["provision_workers"](task_content="Build a login page"))
		assert provisioned == {"created": [], "existing": ["requirements-agent"], "failed": []}
