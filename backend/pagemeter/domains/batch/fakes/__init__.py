"""Batch domain fakes for testing."""
