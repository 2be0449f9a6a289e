"""Relay engine runtime: configuration, status, and the orchestrator."""
