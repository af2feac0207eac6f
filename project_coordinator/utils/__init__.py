"""Shared utilities: logging, timestamps, input validation."""
