"""Visualizer package - Rich terminal views for plans, reports and run history."""

from .report import render_plan, render_report, render_run_history, render_workers

__all__ = [
	"render_plan",
	"render_report",
	"render_run_history",
	"render_workers",
]
