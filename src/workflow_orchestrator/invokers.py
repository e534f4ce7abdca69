"""
Step invokers - How the executor gets a step done.

The executor only knows the `StepInvoker` protocol. The default invoker
renders a deliverable document; a `StepRouter` can hand specific steps to
other subsystems and leave the rest to a fallback.

Invokers either return a StepOutcome or raise StepFailure. The executor
treats any other exception, and a missed deadline, the same way.
"""

import logging
from typing import Optional, Protocol, runtime_checkable

from .models import PhaseContext, StepOutcome
from .templates import deliverable_kind, render

logger = logging.getLogger(__name__)


@runtime_checkable
class StepInvoker(Protocol):
	"""Executes one named step of a phase."""

	async def invoke(self, step: str, context: PhaseContext) -> StepOutcome:
		...


class TemplateStepInvoker:
	"""Produces each step's deliverable from the document templates."""

	async def invoke(self, step: str, context: PhaseContext) -> StepOutcome:
		return StepOutcome.ok(render(deliverable_kind(step), context))


class StepRouter:
	"""
	Routes steps by exact name to registered invokers.

	Steps without a registered invoker go to the fallback.
	"""

	def __init__(self, fallback: Optional[StepInvoker] = None):
		self.fallback: StepInvoker = fallback or TemplateStepInvoker()
		self._routes: dict[str, StepInvoker] = {}

	def register(self, step: str, invoker: StepInvoker) -> None:
		if step in self._routes:
			logger.debug(f"Replacing invoker for step {step}")
		self._routes[step] = invoker

	def unregister(self, step: str) -> None:
		self._routes.pop(step, None)

	@property
	def routes(self) -> list[str]:
		return sorted(self._routes)

	async def invoke(self, step: str, context: PhaseContext) -> StepOutcome:
		invoker = self._routes.get(step, self.fallback)
		return await invoker.invoke(step, context)
