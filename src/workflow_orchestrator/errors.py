"""Exception taxonomy for the orchestration core."""


class OrchestratorError(Exception):
	"""Base class for errors surfaced to callers."""


class InputError(OrchestratorError):
	"""The request cannot start: missing task content, bad strategy, bad budget."""


class PlanValidationError(InputError):
	"""A caller-supplied plan has dangling, forward, or cyclic dependencies."""

	def __init__(self, errors: list[str]):
		self.errors = errors
		super().__init__("Invalid workflow plan: " + "; ".join(errors))


class RegistryError(OrchestratorError):
	"""A worker document could not be written or validated."""


class RegistryConflict(RegistryError):
	"""A worker with the requested name already exists."""

	def __init__(self, name: str):
		self.name = name
		super().__init__(f"Worker '{name}' already exists")


class StepFailure(OrchestratorError):
	"""Raised by step invokers; the executor records it on the phase result."""
