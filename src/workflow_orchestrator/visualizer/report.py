"""Rich views for workflow plans, run reports and run history."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from ..history import RunRecord
from ..models import OrchestrationResponse, PhaseSummary, WorkerDescriptor, WorkflowPlan
from .utils import format_duration_ms, format_timestamp, status_style, truncate

PHASE_ICONS = {
	"completed": "[green]\\[x][/green]",
	"failed": "[red][!][/red]",
	"not_attempted": "[dim][ ][/dim]",
}


def render_plan(
	plan: WorkflowPlan,
	console: Optional[Console] = None,
	summaries: Optional[list[PhaseSummary]] = None,
) -> None:
	"""Render a plan as a Rich Tree with phases, workers and steps."""
	console = console or Console()
	by_phase = {s.phase: s for s in summaries or []}

	tree = Tree(
		f"[bold]{plan.strategy.value} plan[/bold]  "
		f"[dim]({len(plan.phases)} phases, {plan.total_steps} steps, "
		f"est. {plan.estimated_duration} units)[/dim]"
	)

	if not plan.phases:
		tree.add("[dim]No phases[/dim]")

	for phase in plan.phases:
		summary = by_phase.get(phase.name)
		icon = PHASE_ICONS.get(summary.status, "") + " " if summary else ""
		label = f"{icon}[bold]{phase.name}[/bold] [dim]- {phase.description}[/dim]"
		deps = plan.dependencies_of(phase.name)
		if deps:
			label += f" [dim](after {', '.join(deps)})[/dim]"
		branch = tree.add(label)
		branch.add(f"[cyan]workers:[/cyan] {', '.join(phase.worker_names)}")
		for step in phase.steps:
			branch.add(step)

	console.print(tree)


def render_report(response: OrchestrationResponse, console: Optional[Console] = None) -> None:
	"""Render the final report of an orchestration run."""
	console = console or Console()
	results = response.results
	metrics = results.quality_metrics
	analysis = response.task_analysis
	style = status_style(results.completion_status.value)

	lines = []
	lines.append(f"[bold]Status:[/bold] {response.status.value}")
	lines.append(f"[bold]Completion:[/bold] [{style}]{results.completion_status.value}[/{style}]")
	lines.append(
		f"[bold]Complexity:[/bold] {analysis.complexity.level.value} "
		f"(score {analysis.complexity.score:g})"
	)
	lines.append(f"[bold]Domain:[/bold] {analysis.domain.primary}")
	lines.append(f"[bold]Workers:[/bold] {', '.join(response.agents_used) or '-'}")
	lines.append(
		f"[bold]Steps:[/bold] {metrics.successful_steps}/{metrics.total_steps} "
		f"({metrics.overall_success_rate:.0%})"
	)
	lines.append(
		f"[bold]Iterations:[/bold] {response.iterations_used}  "
		f"[bold]Duration:[/bold] {format_duration_ms(response.execution_time_ms)}"
	)

	for title, items in (
		("Warnings", response.warnings),
		("Recommendations", results.recommendations),
		("Next Steps", response.next_steps),
	):
		if items:
			lines.append("")
			lines.append(f"[bold]{title}:[/bold]")
			for item in items:
				lines.append(f"  - {item}")

	console.print(Panel("\n".join(lines), title=f"Workflow: {response.workflow_id}", border_style="cyan"))

	if response.plan is not None:
		render_plan(response.plan, console, results.phase_summaries)


def render_run_history(runs: list[RunRecord], console: Optional[Console] = None) -> None:
	"""Render a table of archived runs."""
	console = console or Console()

	if not runs:
		console.print("[dim]No workflow runs recorded yet.[/dim]")
		return

	table = Table(title=f"Workflow Runs (last {len(runs)})")
	table.add_column("Time")
	table.add_column("Workflow", style="cyan")
	table.add_column("Task")
	table.add_column("Strategy")
	table.add_column("Steps", justify="right")
	table.add_column("Duration", justify="right")
	table.add_column("Result", justify="center")

	for run in runs:
		style = status_style(run.completion_status)
		total = run.successful_steps + run.failed_steps
		table.add_row(
			format_timestamp(run.timestamp),
			run.workflow_id,
			truncate(run.task, 40),
			run.strategy,
			f"{run.successful_steps}/{total}",
			format_duration_ms(run.execution_time_ms),
			f"[{style}]{run.completion_status}[/{style}]",
		)

	console.print(table)


def render_workers(workers: list[WorkerDescriptor], console: Optional[Console] = None) -> None:
	"""Render a table of registry workers."""
	console = console or Console()

	if not workers:
		console.print("[dim]No workers found.[/dim]")
		return

	table = Table(title=f"Workers ({len(workers)})")
	table.add_column("Name", style="cyan")
	table.add_column("Title")
	table.add_column("Capabilities")
	table.add_column("Tier")

	for worker in workers:
		table.add_row(
			worker.name,
			worker.title,
			truncate(", ".join(worker.capabilities), 50),
			worker.resource_tier,
		)

	console.print(table)
