"""Domain models, errors and validation."""
