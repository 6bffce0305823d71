"""Command-line interface for Patchpoint."""
