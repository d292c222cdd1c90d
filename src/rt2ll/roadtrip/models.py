from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

# Road Trip writes "2024-3-5 14:30"; older exports and hand edits use the others.
_DATE_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%m/%d/%Y",
)


class DateParseError(ValueError):
    """Raised when a Road Trip date cannot be parsed."""


def parse_roadtrip_date(raw: str) -> date:
    text = " ".join((raw or "").split())
    if not text:
        raise DateParseError("empty date")
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise DateParseError(f"unrecognized date: {raw!r}")


class FuelRecord(BaseModel):
    """One fillup row from the FUEL RECORDS section of a Road Trip export."""

    model_config = ConfigDict(frozen=True)

    odometer: float
    date: str
    fill_amount: float = 0.0
    price_per_unit: float = 0.0
    total_price: float = 0.0
    partial_fill: str = ""
    mpg: float = 0.0
    note: str = ""
    location: str = ""

    def odometer_value(self) -> float:
        return self.odometer

    def parse_date(self) -> date:
        return parse_roadtrip_date(self.date)
