"""Storage backends for participants and messages."""
