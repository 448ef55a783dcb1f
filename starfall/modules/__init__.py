"""Feature modules of the Starfall progression engine."""
