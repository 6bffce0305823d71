"""Shared utilities: retries, concurrency, text and the GitHub client."""
