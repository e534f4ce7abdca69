"""workflow-orchestrator - Task-to-workflow orchestration over capability-tagged workers."""

__version__ = "0.1.0"
