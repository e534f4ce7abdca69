"""Deliverable templates rendered for each executed step."""

from .models import DeliverableKind, PhaseContext

STEP_SUMMARIES: dict[str, str] = {
	"analyze_requirements": "Requirements analysis completed for: {task}",
	"define_specifications": "Technical specifications documented",
	"create_acceptance_criteria": "Acceptance criteria defined and validated",
	"design_system_architecture": "System architecture designed with modular approach",
	"plan_technical_solution": "Technical solution planned with technology recommendations",
	"create_design_documents": "Design documents created with component diagrams",
	"implement_core_features": "Core features implemented",
	"write_unit_tests": "Unit tests written for the core features",
	"code_review_and_refactor": "Code reviewed and refactored for maintainability",
	"execute_test_plan": "Test plan executed",
	"validate_requirements": "Requirements validated against implementation",
	"quality_assurance_check": "Quality assurance completed",
}

# Checked in order; first match wins
KIND_KEYWORDS: tuple[tuple[DeliverableKind, tuple[str, ...]], ...] = (
	(DeliverableKind.DOCUMENTATION, ("requirements", "spec")),
	(DeliverableKind.DESIGN, ("design", "architecture")),
	(DeliverableKind.CODE, ("implement", "code")),
	(DeliverableKind.TESTING, ("test", "qa")),
)

DOCUMENTATION_TEMPLATE = """# {title}

{summary}

## Task
{task}

## Scope
<!-- Functional and non-functional requirements -->

## Acceptance Criteria
<!-- Measurable criteria -->
{context_section}"""

DESIGN_TEMPLATE = """# {title}

{summary}

## Task
{task}

## Architecture
<!-- Components and their responsibilities -->

## Interfaces
<!-- Contracts between components -->
{context_section}"""

CODE_TEMPLATE = """# {title}

{summary}

## Task
{task}

## Changes
<!-- Modules touched and why -->

## Review Notes
<!-- Findings from review -->
{context_section}"""

TESTING_TEMPLATE = """# {title}

{summary}

## Task
{task}

## Test Cases
<!-- Scenario, expected result, actual result -->

## Findings
<!-- Defects and their status -->
{context_section}"""

GENERIC_TEMPLATE = """# {title}

{summary}

## Task
{task}
{context_section}"""

TEMPLATES: dict[DeliverableKind, str] = {
	DeliverableKind.DOCUMENTATION: DOCUMENTATION_TEMPLATE,
	DeliverableKind.DESIGN: DESIGN_TEMPLATE,
	DeliverableKind.CODE: CODE_TEMPLATE,
	DeliverableKind.TESTING: TESTING_TEMPLATE,
	DeliverableKind.OTHER: GENERIC_TEMPLATE,
}


def deliverable_kind(step: str) -> DeliverableKind:
	"""Classify a step name into a deliverable kind."""
	name = step.lower()
	for kind, keywords in KIND_KEYWORDS:
		if any(k in name for k in keywords):
			return kind
	return DeliverableKind.OTHER


def step_summary(step: str, task: str) -> str:
	"""One-line summary of what a step produced."""
	template = STEP_SUMMARIES.get(step)
	if template is None:
		return f"{step} executed successfully"
	return template.format(task=task)


def render(kind: DeliverableKind, context: PhaseContext) -> str:
	"""
	Render the deliverable document for one step.

	Args:
		kind: Deliverable kind, selecting the template
		context: The step's phase context

	Returns:
		Markdown document
	"""
	context_section = ""
	if context.shared_context:
		lines = ["", "## Inputs From Earlier Phases"]
		lines.extend(f"- {name}" for name in context.shared_context)
		context_section = "\n".join(lines) + "\n"

	title = context.step.replace("_", " ").title()
	if context.workers:
		title = f"{title} ({', '.join(context.workers)})"

	return TEMPLATES[kind].format(
		title=title,
		summary=step_summary(context.step, context.task.content),
		task=context.task.content,
		context_section=context_section,
	)
