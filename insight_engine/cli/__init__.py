"""Command-line interface for inspecting engine decisions."""
