"""Bundled example decisions."""
