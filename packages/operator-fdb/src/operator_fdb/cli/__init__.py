"""Command-line interface for the coordinator operator."""
