"""Shared utilities for the ciorch packages."""
