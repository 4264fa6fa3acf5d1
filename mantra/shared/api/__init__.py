"""Shared API layer: middleware, exception handlers and dependencies."""
