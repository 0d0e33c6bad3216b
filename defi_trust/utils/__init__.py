"""Shared utilities: errors and input validation."""
