"""Packaged resources for reactide (JSON schemas)."""
