"""Registry module - Worker discovery and creation."""

from .catalog import DEFAULT_TRIAD, STANDARD_WORKERS, builtin_descriptor
from .loader import InvalidWorkerFile, WorkerRegistry, parse_worker_document

__all__ = [
	"WorkerRegistry",
	"InvalidWorkerFile",
	"parse_worker_document",
	"STANDARD_WORKERS",
	"DEFAULT_TRIAD",
	"builtin_descriptor",
]
