"""
Reconcile package: Match Road Trip fillups against LubeLogger and transform them.
"""
from .matcher import (
    ComparatorError,
    GasRecordIndex,
    LookupResult,
    LookupStatus,
    odometer_key,
)
from .transformer import transform_fuel_record

__all__ = [
    "ComparatorError",
    "GasRecordIndex",
    "LookupResult",
    "LookupStatus",
    "odometer_key",
    "transform_fuel_record",
]
