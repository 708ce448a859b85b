"""Webhook adapters."""

__all__ = []
