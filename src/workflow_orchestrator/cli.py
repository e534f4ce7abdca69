"""CLI for workflow-orchestrator: serve, run, workers, history, and doctor commands."""

import argparse
import asyncio
import platform
import re
import sys
from datetime import datetime, timedelta
from importlib.metadata import version as pkg_version
from pathlib import Path

from .config import Config, load_config
from .errors import OrchestratorError
from .logging_config import setup_logging
from .models import BuildPlanRequest, OrchestrationRequest, Strategy, WorkerSpec


def _orchestrator(config: Config, worker_dir: str | None = None):
	from .orchestrator import WorkflowOrchestrator
	from .registry import WorkerRegistry

	registry = WorkerRegistry(Path(worker_dir).expanduser()) if worker_dir else None
	return WorkflowOrchestrator(config, registry=registry)


def _split(value: str | None) -> list[str] | None:
	if not value:
		return None
	names = [n.strip() for n in value.split(",") if n.strip()]
	return names or None


def _parse_since(since_str: str) -> str:
	"""Parse a duration string like '1h', '24h', '7d' into an ISO timestamp."""
	match = re.match(r"^(\d+)([hmd])$", since_str)
	if not match:
		print(f"Invalid --since format: {since_str} (use e.g. 1h, 24h, 7d)")
		sys.exit(1)
	amount = int(match.group(1))
	unit = match.group(2)
	if unit == "h":
		delta = timedelta(hours=amount)
	elif unit == "m":
		delta = timedelta(minutes=amount)
	else:
		delta = timedelta(days=amount)
	return (datetime.now() - delta).isoformat()


def cmd_serve(args: argparse.Namespace) -> None:
	"""Run the MCP server (stdio transport)."""
	from .server import mcp
	mcp.run()


def cmd_run(args: argparse.Namespace) -> None:
	"""Orchestrate a task from the terminal."""
	from rich.console import Console

	from .visualizer import render_plan, render_report

	config = load_config()
	setup_logging(args.log_level or "WARNING", config.log_dir)
	orchestrator = _orchestrator(config, args.worker_dir)
	console = Console()

	try:
		if args.plan_only:
			plan = orchestrator.build_plan(BuildPlanRequest(
				task_content=args.task,
				strategy=args.strategy,
				selected_workers=_split(args.workers),
				complexity_hint=args.complexity,
				domain_hint=args.domain,
			))
			if args.json:
				print(plan.model_dump_json(indent=2))
			else:
				render_plan(plan, console)
			return

		response = asyncio.run(orchestrator.orchestrate(OrchestrationRequest(
			task_content=args.task,
			strategy=args.strategy,
			selected_workers=_split(args.workers),
			context_sharing=args.context_sharing,
			max_iterations=args.max_iterations,
			complexity_hint=args.complexity,
			domain_hint=args.domain,
		)))
	except OrchestratorError as e:
		print(f"Error: {e}", file=sys.stderr)
		sys.exit(1)

	if args.json:
		print(response.model_dump_json(indent=2))
	else:
		render_report(response, console)


def cmd_workers(args: argparse.Namespace) -> None:
	"""Worker registry subcommand."""
	from rich.console import Console

	from .visualizer import render_workers

	config = load_config()
	orchestrator = _orchestrator(config, args.worker_dir)
	action = getattr(args, "workers_action", None) or "list"

	if action == "init":
		result = orchestrator.init_standard_workers()
		print(f"Worker directory: {orchestrator.registry.directory}")
		print(f"  Created: {', '.join(result['created']) or '-'}")
		print(f"  Skipped (already exist): {', '.join(result['skipped']) or '-'}")
		return

	if action == "create":
		instructions = ""
		if args.instructions_file:
			instructions = Path(args.instructions_file).read_text(encoding="utf-8")
		try:
			worker = orchestrator.create_worker(WorkerSpec(
				name=args.name,
				capabilities=_split(args.capabilities) or [],
				title=args.title or "",
				description=args.description or "",
				resource_tier=args.tier,
				instructions=instructions,
			))
		except OrchestratorError as e:
			print(f"Error: {e}", file=sys.stderr)
			sys.exit(1)
		print(f"Created worker {worker.name} at {worker.source_path}")
		return

	console = Console()
	render_workers(orchestrator.list_workers(getattr(args, "capability", None)), console)
	for invalid in orchestrator.registry.invalid_files:
		console.print(f"[red]Invalid:[/red] {invalid.file} - {invalid.error}")


def cmd_history(args: argparse.Namespace) -> None:
	"""Show archived workflow runs."""
	from rich.console import Console

	from .models import OrchestrationResponse
	from .visualizer import render_report, render_run_history

	config = load_config()
	orchestrator = _orchestrator(config)
	console = Console()

	if args.workflow_id:
		record = orchestrator.get_run(args.workflow_id)
		if record is None:
			print(f"Workflow run {args.workflow_id} not found")
			sys.exit(1)
		render_report(OrchestrationResponse.model_validate_json(record.report_json), console)
		return

	since = _parse_since(args.since) if args.since else None
	runs = orchestrator.list_runs(status=args.status, since=since, limit=args.limit)
	render_run_history(runs, console)


def _check_config_toml(config_dir: Path) -> tuple[str, str | None]:
	"""Validate config.toml. Returns (status, issue_or_none)."""
	import tomllib

	toml_path = config_dir / "config.toml"
	if not toml_path.exists():
		return "not found (optional)", None
	try:
		with open(toml_path, "rb") as f:
			tomllib.load(f)
		return "valid", None
	except tomllib.TOMLDecodeError as e:
		msg = f"config.toml parse error: {e}"
		return f"INVALID ({e})", msg


def _check_server_startup() -> tuple[str, str | None]:
	"""Try importing and counting registered tools. Returns (status, issue_or_none)."""
	try:
		from .server import mcp as server_instance
		# FastMCP stores tools internally - count them
		tools = server_instance._tool_manager._tools
		count = len(tools)
		return f"OK ({count} tools registered)", None
	except Exception as e:
		return f"FAILED ({e})", f"Server startup failed: {e}"


def cmd_doctor(args: argparse.Namespace) -> None:
	"""Health check - verify installation and configuration."""
	print("workflow-orchestrator doctor")
	print(f"{'=' * 40}")

	config = load_config()
	issues: list[str] = []

	# System info
	py_ver = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
	print(f"  Python:       {py_ver}")
	print(f"  Platform:     {platform.system()} {platform.machine()}")
	print()

	# Core deps
	print("  Core deps:")
	for dep in ["mcp", "pydantic", "PyYAML", "platformdirs", "rich"]:
		try:
			print(f"    {dep:14s} {pkg_version(dep)}")
		except Exception:
			print(f"    {dep:14s} MISSING")
			issues.append(f"Missing dependency: {dep}")
	print()

	# Paths
	print(f"  Config dir:   {config.config_dir}")
	print(f"  Data dir:     {config.data_dir}")
	toml_status, toml_issue = _check_config_toml(config.config_dir)
	print(f"  config.toml:  {toml_status}")
	if toml_issue:
		issues.append(toml_issue)
	print()

	# Worker registry
	orchestrator = _orchestrator(config)
	registry = orchestrator.registry
	print(f"  Workers dir:  {registry.directory}")
	if registry.directory.is_dir():
		workers = registry.discover()
		print(f"  Workers:      {len(workers)} valid")
		for invalid in registry.invalid_files:
			print(f"    INVALID {invalid.file}: {invalid.error}")
			issues.append(f"Invalid worker document: {invalid.file}")
	else:
		print("  Workers:      directory missing (built-in workers will be used)")
	print()

	# Run archive
	if config.archive_runs:
		store = orchestrator.run_store
		print(f"  Runs DB:      {config.runs_db_path} ({store.count()} runs)")
	else:
		print("  Runs DB:      archiving disabled")
	print(f"  Defaults:     strategy={config.strategy.value}, max_iterations={config.max_iterations}, "
		f"phase_timeout={config.phase_timeout:g}s")
	print()

	server_status, server_issue = _check_server_startup()
	print(f"  MCP server:   {server_status}")
	if server_issue:
		issues.append(server_issue)

	print()
	if issues:
		print(f"  {len(issues)} issue(s) found:")
		for issue in issues:
			print(f"    - {issue}")
		sys.exit(1)
	else:
		print("  All checks passed.")


def main() -> None:
	"""CLI entry point."""
	parser = argparse.ArgumentParser(
		prog="workflow-orchestrator",
		description="MCP server that turns tasks into phased workflows over capability-tagged workers",
	)
	subparsers = parser.add_subparsers(dest="command")

	# serve
	serve_parser = subparsers.add_parser("serve", help="Run MCP server (stdio)")
	serve_parser.set_defaults(func=cmd_serve)

	# run
	run_parser = subparsers.add_parser("run", help="Orchestrate a task")
	run_parser.add_argument("task", help="Task description")
	run_parser.add_argument(
		"--strategy",
		choices=[s.value for s in Strategy],
		default=None,
		help="Plan strategy (default from config)",
	)
	run_parser.add_argument("--workers", type=str, default=None, help="Comma-separated worker names")
	run_parser.add_argument("--worker-dir", type=str, default=None, help="Worker registry directory")
	run_parser.add_argument("--max-iterations", type=int, default=None, help="Maximum phases to attempt")
	run_parser.add_argument(
		"--context-sharing",
		action=argparse.BooleanOptionalAction,
		default=None,
		help="Share phase outputs with later phases",
	)
	run_parser.add_argument("--complexity", type=str, default=None, help="Complexity hint")
	run_parser.add_argument("--domain", type=str, default=None, help="Domain hint")
	run_parser.add_argument("--plan-only", action="store_true", help="Build the plan without executing it")
	run_parser.add_argument("--json", action="store_true", help="Print JSON instead of rich output")
	run_parser.add_argument("--log-level", type=str, default=None, help="Console log level (default: WARNING)")
	run_parser.set_defaults(func=cmd_run)

	# workers
	workers_parser = subparsers.add_parser("workers", help="Manage the worker registry")
	workers_parser.add_argument("--worker-dir", type=str, default=None, help="Worker registry directory")
	workers_subparsers = workers_parser.add_subparsers(dest="workers_action")

	workers_list = workers_subparsers.add_parser("list", help="List workers")
	workers_list.add_argument("--capability", type=str, default=None, help="Filter by capability")
	workers_list.set_defaults(func=cmd_workers)

	workers_init = workers_subparsers.add_parser("init", help="Create the standard workers")
	workers_init.set_defaults(func=cmd_workers)

	workers_create = workers_subparsers.add_parser("create", help="Create a worker")
	workers_create.add_argument("name", help="Worker name")
	workers_create.add_argument("--capabilities", type=str, default=None, help="Comma-separated capabilities")
	workers_create.add_argument("--title", type=str, default=None, help="Role title")
	workers_create.add_argument("--description", type=str, default=None, help="One-line description")
	workers_create.add_argument("--tier", type=str, default="standard", choices=["standard", "premium"])
	workers_create.add_argument("--instructions-file", type=str, default=None, help="File with instructions")
	workers_create.set_defaults(func=cmd_workers)

	workers_parser.set_defaults(func=cmd_workers)

	# history
	history_parser = subparsers.add_parser("history", help="Show archived workflow runs")
	history_parser.add_argument("workflow_id", nargs="?", default=None, help="Workflow ID for detail view")
	history_parser.add_argument("--status", type=str, default=None, help="Filter by status")
	history_parser.add_argument("--since", type=str, default=None, help="Filter by time (e.g. 1h, 24h, 7d)")
	history_parser.add_argument("--limit", type=int, default=20, help="Max results")
	history_parser.set_defaults(func=cmd_history)

	# doctor
	doctor_parser = subparsers.add_parser("doctor", help="Health check")
	doctor_parser.set_defaults(func=cmd_doctor)

	args = parser.parse_args()

	if not args.command:
		parser.print_help()
		sys.exit(1)

	args.func(args)
