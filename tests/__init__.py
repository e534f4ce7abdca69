"""
Tests for workflow-orchestrator.

Shared fixtures and fake step invokers live in helpers.py.
"""
