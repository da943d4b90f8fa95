"""Observability — logging setup and status output."""
