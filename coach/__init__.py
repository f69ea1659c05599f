"""Workout recommendation and tool-orchestration engine."""
