"""Subcommands for the ciorch CLI."""
