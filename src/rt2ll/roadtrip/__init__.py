"""
Road Trip package: fuel records parsed from Road Trip CSV exports.
"""
from .loaders import SourceFormatError, load_fuel_records
from .models import DateParseError, FuelRecord, parse_roadtrip_date

__all__ = [
    "DateParseError",
    "FuelRecord",
    "SourceFormatError",
    "load_fuel_records",
    "parse_roadtrip_date",
]
