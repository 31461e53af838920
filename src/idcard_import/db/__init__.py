"""Storage adapters for bulk registration."""
