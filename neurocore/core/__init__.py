"""Core contracts shared across NeuroCore."""
