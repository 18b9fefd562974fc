"""Core scanning, resolution, and reconciliation engine."""
