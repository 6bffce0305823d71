"""Shared pytest fixtures for Patchpoint tests."""
