"""Usage domain fakes for testing."""
