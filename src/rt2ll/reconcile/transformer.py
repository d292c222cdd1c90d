"""
Transformer: Convert Road Trip fuel records to LubeLogger gas records.
"""
from __future__ import annotations

import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ..lubelogger.models import FALSE, TRUE, ExtraField, GasRecord
from ..roadtrip.models import FuelRecord

LOCATION_FIELD = "Location"
_NOTE_STRIP = " \t\r\n"


def _fixed(value: float, places: int) -> str:
    """Round half-up on the value as written, not its binary expansion."""
    if not math.isfinite(value):
        raise ValueError(f"cannot format non-finite amount: {value}")
    quantum = Decimal(1).scaleb(-places)
    try:
        return str(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation as e:
        raise ValueError(f"amount out of range: {value}") from e


def format_date(d: date) -> str:
    """M/D/YYYY without zero padding, e.g. 3/5/2024."""
    return f"{d.month}/{d.day}/{d.year}"


def format_odometer(value: float) -> str:
    return str(int(value))


def format_fuel_consumed(value: float) -> str:
    return _fixed(value, 3)


def format_cost(value: float) -> str:
    return _fixed(value, 2)


def format_fuel_economy(value: float) -> str:
    if not math.isfinite(value):
        raise ValueError(f"cannot format non-finite fuel economy: {value}")
    return f"{value:f}"


def format_flag(value: bool) -> str:
    return TRUE if value else FALSE


def build_notes(rtf: FuelRecord) -> str:
    summary = (
        f"{_fixed(rtf.fill_amount, 2)} gallons @ ${_fixed(rtf.price_per_unit, 2)} "
        f"from {rtf.location}"
    )
    return f"{rtf.note}\n{summary}".strip(_NOTE_STRIP)


def transform_fuel_record(rtf: FuelRecord) -> GasRecord:
    """
    Build the LubeLogger gas record for one Road Trip fillup.

    Raises DateParseError (or ValueError for non-finite amounts); no partial
    record is ever returned.
    """
    fill_date = rtf.parse_date()
    return GasRecord(
        date=format_date(fill_date),
        odometer=format_odometer(rtf.odometer),
        fuel_consumed=format_fuel_consumed(rtf.fill_amount),
        cost=format_cost(rtf.total_price),
        fuel_economy=format_fuel_economy(rtf.mpg),
        is_fill_to_full=format_flag(rtf.partial_fill == ""),
        missed_fuel_up=format_flag(False),
        notes=build_notes(rtf),
        extra_fields=[ExtraField(name=LOCATION_FIELD, value=rtf.location)],
    )
