"""Test helpers package."""
