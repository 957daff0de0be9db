"""Rich output helpers for the CLI."""
