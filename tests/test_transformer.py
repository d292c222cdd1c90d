from __future__ import annotations

from datetime import date

import pytest

from rt2ll.reconcile.matcher import odometer_key
from rt2ll.reconcile.transformer import (
    format_cost,
    format_date,
    format_fuel_consumed,
    format_fuel_economy,
    transform_fuel_record,
)
from rt2ll.roadtrip.models import DateParseError, FuelRecord


def _shell_fillup(**overrides) -> FuelRecord:
    values = dict(
        odometer=45231.0,
        date="2024-3-5",
        fill_amount=12.345,
        total_price=38.50,
        price_per_unit=3.119,
        partial_fill="",
        mpg=25.12,
        note="highway",
        location="Shell #4",
    )
    values.update(overrides)
    return FuelRecord(**values)


def test_transform_full_fillup():
    gr = transform_fuel_record(_shell_fillup())
    assert gr.date == "3/5/2024"
    assert gr.odometer == "45231"
    assert gr.fuel_consumed == "12.345"
    assert gr.cost == "38.50"
    assert gr.fuel_economy == "25.120000"
    assert gr.is_fill_to_full == "True"
    assert gr.missed_fuel_up == "False"
    assert gr.notes == "highway\n12.35 gallons @ $3.12 from Shell #4"
    assert [(ef.name, ef.value) for ef in gr.extra_fields] == [("Location", "Shell #4")]
    assert gr.id == ""


def test_partial_fill_marker_means_not_full():
    gr = transform_fuel_record(_shell_fillup(partial_fill="Partial"))
    assert gr.is_fill_to_full == "False"


def test_notes_without_source_note_are_trimmed():
    gr = transform_fuel_record(_shell_fillup(note="  "))
    assert gr.notes == "12.35 gallons @ $3.12 from Shell #4"


def test_odometer_matches_comparator_value():
    rtf = _shell_fillup(odometer=45588.6)
    gr = transform_fuel_record(rtf)
    assert gr.odometer == "45588"
    assert odometer_key(gr) == odometer_key(rtf)


def test_unparseable_date_raises():
    with pytest.raises(DateParseError):
        transform_fuel_record(_shell_fillup(date="05.03.2024"))


def test_format_helpers():
    assert format_date(date(2024, 12, 25)) == "12/25/2024"
    assert format_date(date(2024, 1, 9)) == "1/9/2024"
    assert format_fuel_consumed(10) == "10.000"
    assert format_fuel_consumed(2.0005) == "2.001"
    assert format_cost(0) == "0.00"
    assert format_cost(2.675) == "2.68"
    assert format_fuel_economy(30) == "30.000000"


def test_non_finite_amount_raises():
    with pytest.raises(ValueError):
        format_cost(float("nan"))


def test_out_of_range_amount_raises_value_error():
    with pytest.raises(ValueError, match="out of range"):
        format_cost(1e27)
    with pytest.raises(ValueError):
        transform_fuel_record(_shell_fillup(total_price=1e27))
