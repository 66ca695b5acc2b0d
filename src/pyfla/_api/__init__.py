"""Endpoint modules (internal)."""
