"""
LubeLogger package: destination models and the REST client.
"""
from .client import (
    LubeLoggerClient,
    LubeLoggerError,
    LubeLoggerHttpError,
    LubeLoggerResponseError,
)
from .models import ExtraField, GasRecord, PostResponse, Vehicle

__all__ = [
    "ExtraField",
    "GasRecord",
    "LubeLoggerClient",
    "LubeLoggerError",
    "LubeLoggerHttpError",
    "LubeLoggerResponseError",
    "PostResponse",
    "Vehicle",
]
