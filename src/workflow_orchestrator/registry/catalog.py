"""Standard worker catalog used to seed registries and resolve missing roles."""

from ..models import WorkerDescriptor, WorkerSpec

STANDARD_WORKERS: list[WorkerSpec] = [
	WorkerSpec(
		name="requirements-agent",
		title="Requirements Analyst",
		description="Requirements gathering and analysis specialist",
		capabilities=["requirements-analysis", "requirements-gathering", "requirements-validation", "requirements-tracing"],
	),
	WorkerSpec(
		name="design-agent",
		title="System Designer",
		description="System design and architecture specialist",
		capabilities=["system-design", "architecture-design", "interface-design", "database-design"],
	),
	WorkerSpec(
		name="coding-agent",
		title="Software Engineer",
		description="Code development and implementation specialist",
		capabilities=["implementation", "code-review", "refactoring"],
	),
	WorkerSpec(
		name="test-agent",
		title="Test Engineer",
		description="Testing and quality assurance specialist",
		capabilities=["testing", "test-design", "defect-management", "quality-assurance"],
	),
	WorkerSpec(
		name="tasks-agent",
		title="Project Manager",
		description="Task management and project coordination specialist",
		capabilities=["project-management", "task-planning", "progress-tracking", "risk-management"],
	),
	WorkerSpec(
		name="spec-agent",
		title="Documentation Specialist",
		description="Specification and documentation specialist",
		capabilities=["documentation", "specification-writing", "standards-review", "template-authoring"],
	),
]

# Fallback when explicit worker names resolve to nothing
DEFAULT_TRIAD = ["requirements-agent", "design-agent", "coding-agent"]


def default_instructions(spec: WorkerSpec) -> str:
	"""Instructions block written for workers created without one."""
	lines = [f"You are {spec.description or spec.name}.", "", "Capabilities:"]
	lines.extend(f"- {cap}" for cap in spec.capabilities)
	lines.extend(["", "Provide professional help and recommendations for the assigned phase."])
	return "\n".join(lines)


def get_standard_spec(name: str) -> WorkerSpec | None:
	"""Look up a standard worker spec by name."""
	for spec in STANDARD_WORKERS:
		if spec.name == name:
			return spec
	return None


def builtin_descriptor(name: str) -> WorkerDescriptor | None:
	"""Descriptor for a standard worker that has no registry document."""
	spec = get_standard_spec(name)
	if spec is None:
		return None
	return WorkerDescriptor(
		name=spec.name,
		title=spec.title,
		description=spec.description,
		capabilities=list(spec.capabilities),
		resource_tier=spec.resource_tier,
		instructions=spec.instructions or default_instructions(spec),
	)
