"""Shared helpers for the goal delivery core."""
