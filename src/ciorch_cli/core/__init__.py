"""Core helpers for the ciorch CLI."""
