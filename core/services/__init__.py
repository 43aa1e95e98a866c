"""Entity services."""
