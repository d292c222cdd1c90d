"""
Loaders: read the fuel section of a Road Trip CSV export.
"""
from __future__ import annotations

import csv
import re
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from .models import FuelRecord

FUEL_SECTION = "FUEL RECORDS"

# header text (lowercased, units removed) -> FuelRecord field
_COLUMNS = {
    "odometer": "odometer",
    "date": "date",
    "fill amount": "fill_amount",
    "price per unit": "price_per_unit",
    "total price": "total_price",
    "partial fill": "partial_fill",
    "mpg": "mpg",
    "fuel economy": "mpg",
    "note": "note",
    "location": "location",
}
_NUMERIC_FIELDS = {"odometer", "fill_amount", "price_per_unit", "total_price", "mpg"}
_REQUIRED_FIELDS = ("odometer", "date")


class SourceFormatError(ValueError):
    """Raised when a Road Trip export cannot be interpreted."""


def _normalize_header(text: str) -> str:
    text = re.sub(r"\([^)]*\)", "", text or "")
    return " ".join(text.strip().lower().split())


def _is_blank(row: List[str]) -> bool:
    return not any(cell.strip() for cell in row)


def _section_title(row: List[str]) -> Optional[str]:
    """Return the title when the row opens a new section."""
    if not row:
        return None
    first = row[0].strip()
    if not first or not first.isupper() or any(ch.isdigit() for ch in first):
        return None
    if any(cell.strip() for cell in row[1:]):
        return None
    return first


def _parse_number(raw: str, field: str, line_no: int) -> float:
    text = (raw or "").strip().replace(",", "").replace("$", "")
    if not text:
        if field in _REQUIRED_FIELDS:
            raise SourceFormatError(f"line {line_no}: {field} is empty")
        return 0.0
    try:
        return float(text)
    except ValueError as e:
        raise SourceFormatError(f"line {line_no}: {field} is not a number: {raw!r}") from e


def _iter_section(rows: Iterator[Tuple[int, List[str]]], title: str) -> Iterator[Tuple[int, List[str]]]:
    in_section = False
    for line_no, row in rows:
        heading = _section_title(row)
        if heading is not None:
            if in_section:
                return
            in_section = heading == title
            continue
        if in_section:
            if _is_blank(row):
                return
            yield line_no, row


def _column_map(header: List[str]) -> Dict[int, str]:
    mapping: Dict[int, str] = {}
    for idx, name in enumerate(header):
        field = _COLUMNS.get(_normalize_header(name))
        if field and field not in mapping.values():
            mapping[idx] = field
    missing = [f for f in _REQUIRED_FIELDS if f not in mapping.values()]
    if missing:
        raise SourceFormatError(f"{FUEL_SECTION} header is missing columns: {', '.join(missing)}")
    return mapping


def load_fuel_records(path: str | Path) -> List[FuelRecord]:
    """
    Parse the FUEL RECORDS section of a Road Trip CSV export, in file order.

    Returns an empty list when the export has no fuel section.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Road Trip CSV not found: {p}")

    try:
        return _read_fuel_records(p)
    except (UnicodeDecodeError, csv.Error) as e:
        raise SourceFormatError(f"unreadable Road Trip CSV {p}: {e}") from e


def _read_fuel_records(p: Path) -> List[FuelRecord]:
    with p.open("r", encoding="utf-8-sig", newline="") as f:
        rows = ((i, row) for i, row in enumerate(csv.reader(f), 1))
        section = _iter_section(rows, FUEL_SECTION)

        first = next(section, None)
        if first is None:
            return []
        columns = _column_map(first[1])

        records: List[FuelRecord] = []
        for line_no, row in section:
            values: Dict[str, object] = {}
            for idx, field in columns.items():
                cell = row[idx] if idx < len(row) else ""
                if field in _NUMERIC_FIELDS:
                    values[field] = _parse_number(cell, field, line_no)
                elif field in _REQUIRED_FIELDS and not cell.strip():
                    raise SourceFormatError(f"line {line_no}: {field} is empty")
                else:
                    values[field] = cell.strip()
            records.append(FuelRecord(**values))
    return records
