"""
Run archive - SQLite storage of terminated workflow runs.

Every completed or failed orchestration is recorded with its headline numbers
and the full JSON report, so runs can be listed and inspected later.
"""

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from .models import OrchestrationResponse

logger = logging.getLogger(__name__)


@dataclass
class RunRecord:
	"""One archived workflow run."""
	workflow_id: str
	task: str
	strategy: str
	status: str
	completion_status: str
	successful_steps: int = 0
	failed_steps: int = 0
	total_phases: int = 0
	execution_time_ms: int = 0
	timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
	report_json: str = ""

	@classmethod
	def from_response(cls, task: str, response: OrchestrationResponse) -> "RunRecord":
		metrics = response.results.quality_metrics
		return cls(
			workflow_id=response.workflow_id,
			task=task,
			strategy=response.plan.strategy.value if response.plan else "",
			status=response.status.value,
			completion_status=response.results.completion_status.value,
			successful_steps=metrics.successful_steps,
			failed_steps=metrics.failed_steps,
			total_phases=response.total_phases,
			execution_time_ms=response.execution_time_ms,
			timestamp=response.timestamp,
			report_json=response.model_dump_json(),
		)

	def report(self) -> dict[str, Any]:
		"""The archived report, decoded."""
		if not self.report_json:
			return {}
		return json.loads(self.report_json)

	def to_dict(self, include_report: bool = False) -> dict[str, Any]:
		data = {
			"workflow_id": self.workflow_id,
			"task": self.task,
			"strategy": self.strategy,
			"status": self.status,
			"completion_status": self.completion_status,
			"successful_steps": self.successful_steps,
			"failed_steps": self.failed_steps,
			"total_phases": self.total_phases,
			"execution_time_ms": self.execution_time_ms,
			"timestamp": self.timestamp,
		}
		if include_report:
			data["report"] = self.report()
		return data


class RunStore:
	"""SQLite-backed storage for workflow runs."""

	def __init__(self, db_path: Path | str):
		self.db_path = Path(db_path)
		self.db_path.parent.mkdir(parents=True, exist_ok=True)
		self._ensure_table()

	def _ensure_table(self) -> None:
		"""Create the workflow_runs table if it doesn't exist."""
		with sqlite3.connect(str(self.db_path)) as conn:
			conn.execute("""
				CREATE TABLE IF NOT EXISTS workflow_runs (
					workflow_id TEXT PRIMARY KEY,
					task TEXT NOT NULL,
					strategy TEXT DEFAULT '',
					status TEXT NOT NULL,
					completion_status TEXT NOT NULL,
					successful_steps INTEGER DEFAULT 0,
					failed_steps INTEGER DEFAULT 0,
					total_phases INTEGER DEFAULT 0,
					execution_time_ms INTEGER DEFAULT 0,
					timestamp TEXT NOT NULL,
					report_json TEXT DEFAULT ''
				)
			""")
			conn.execute("""
				CREATE INDEX IF NOT EXISTS idx_workflow_runs_status ON workflow_runs(status)
			""")
			conn.execute("""
				CREATE INDEX IF NOT EXISTS idx_workflow_runs_timestamp ON workflow_runs(timestamp)
			""")

	def _connect(self) -> sqlite3.Connection:
		conn = sqlite3.connect(str(self.db_path))
		conn.row_factory = sqlite3.Row
		return conn

	def record(self, record: RunRecord) -> None:
		"""Insert or replace a run record."""
		with self._connect() as conn:
			conn.execute(
				"""
				INSERT OR REPLACE INTO workflow_runs
				(workflow_id, task, strategy, status, completion_status, successful_steps,
				 failed_steps, total_phases, execution_time_ms, timestamp, report_json)
				VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
				""",
				(
					record.workflow_id,
					record.task,
					record.strategy,
					record.status,
					record.completion_status,
					record.successful_steps,
					record.failed_steps,
					record.total_phases,
					record.execution_time_ms,
					record.timestamp,
					record.report_json,
				),
			)
		logger.debug(f"Archived workflow run {record.workflow_id}")

	def query(
		self,
		status: Optional[str] = None,
		since: Optional[str] = None,
		limit: int = 20,
	) -> list[RunRecord]:
		"""Query archived runs, newest first."""
		conditions: list[str] = []
		params: list[Any] = []

		if status:
			conditions.append("status = ?")
			params.append(status)
		if since:
			conditions.append("timestamp >= ?")
			params.append(since)

		where = " AND ".join(conditions) if conditions else "1=1"

		with self._connect() as conn:
			cursor = conn.execute(
				f"SELECT * FROM workflow_runs WHERE {where} ORDER BY timestamp DESC LIMIT ?",
				[*params, limit],
			)
			rows = cursor.fetchall()

		return [_row_to_record(row) for row in rows]

	def get(self, workflow_id: str) -> Optional[RunRecord]:
		"""Fetch one run by id."""
		with self._connect() as conn:
			row = conn.execute(
				"SELECT * FROM workflow_runs WHERE workflow_id = ?",
				(workflow_id,),
			).fetchone()
		return _row_to_record(row) if row else None

	def count(self) -> int:
		with self._connect() as conn:
			return conn.execute("SELECT COUNT(*) FROM workflow_runs").fetchone()[0]


def _row_to_record(row: sqlite3.Row) -> RunRecord:
	return RunRecord(
		workflow_id=row["workflow_id"],
		task=row["task"],
		strategy=row["strategy"],
		status=row["status"],
		completion_status=row["completion_status"],
		successful_steps=row["successful_steps"],
		failed_steps=row["failed_steps"],
		total_phases=row["total_phases"],
		execution_time_ms=row["execution_time_ms"],
		timestamp=row["timestamp"],
		report_json=row["report_json"],
	)
