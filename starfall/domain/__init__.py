"""Domain layer: immutable models of reference and player data."""
