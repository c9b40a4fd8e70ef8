"""Runners - entry points for NeuroCore."""
