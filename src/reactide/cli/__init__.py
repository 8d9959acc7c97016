"""Command-line interface for reactide."""
