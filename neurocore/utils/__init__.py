"""Utility helpers for NeuroCore."""

from .logging import setup_logging, plugin_logger

__all__ = ["setup_logging", "plugin_logger"]
