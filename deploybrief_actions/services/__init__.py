"""Action services."""
