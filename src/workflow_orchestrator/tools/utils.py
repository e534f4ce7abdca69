"""Shared helpers for MCP tool handlers."""

import json
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from ..errors import OrchestratorError, PlanValidationError


def dump(payload: Any) -> str:
	"""Serialize a tool result as indented JSON."""
	if isinstance(payload, BaseModel):
		return payload.model_dump_json(indent=2)
	return json.dumps(payload, indent=2, default=str)


def error_response(error: Exception) -> str:
	"""JSON error payload for errors that stop an operation."""
	body: dict[str, Any] = {"error": str(error)}
	if isinstance(error, PlanValidationError):
		body["details"] = error.errors
	elif isinstance(error, ValidationError):
		body["error"] = "Invalid request"
		body["details"] = [
			f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in error.errors()
		]
	elif not isinstance(error, OrchestratorError):
		body["error"] = f"{type(error).__name__}: {error}"
	return json.dumps(body, indent=2)


def split_names(value: str) -> Optional[list[str]]:
	"""Parse a comma-separated list; None when nothing was given."""
	names = [n.strip() for n in value.split(",") if n.strip()]
	return names or None
