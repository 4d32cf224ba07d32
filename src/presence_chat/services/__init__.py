"""Core chat services."""
