"""Shared utilities for visualizer views."""

from datetime import datetime


def format_duration_ms(ms: int) -> str:
	"""Format a millisecond duration for display. e.g. '45ms', '1.2s', '2m 3s'."""
	seconds = ms / 1000
	if ms < 1:
		return "<1ms"
	if seconds < 1.0:
		return f"{ms}ms"
	if seconds < 60.0:
		return f"{seconds:.1f}s"
	minutes = int(seconds // 60)
	secs = seconds % 60
	return f"{minutes}m {secs:.0f}s"


def format_timestamp(iso_str: str) -> str:
	"""Format an ISO timestamp as relative time (e.g. '2m ago') or absolute."""
	try:
		dt = datetime.fromisoformat(iso_str)
		delta = datetime.now() - dt
		total_secs = int(delta.total_seconds())

		if total_secs < 0:
			return iso_str[:19]
		if total_secs < 60:
			return f"{total_secs}s ago"
		if total_secs < 3600:
			return f"{total_secs // 60}m ago"
		if total_secs < 86400:
			return f"{total_secs // 3600}h ago"
		days = total_secs // 86400
		return f"{days}d ago"
	except (ValueError, TypeError):
		return str(iso_str)[:19]


def truncate(text: str, max_len: int = 60) -> str:
	"""Shorten text for table display."""
	text = " ".join(text.split())
	if len(text) <= max_len:
		return text
	return text[:max_len - 3] + "..."


def status_style(status: str) -> str:
	"""Rich style for a run, phase or completion status."""
	if status == "completed":
		return "green"
	if status in ("partially_completed", "executing", "not_attempted"):
		return "yellow"
	return "red"
