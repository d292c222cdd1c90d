"""Sync Road Trip fuel records into LubeLogger."""

__version__ = "0.1.0"
