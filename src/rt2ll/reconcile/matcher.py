"""
Matcher: odometer comparator keys and the gas record lookup index.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Generic, Iterable, Optional, Protocol, TypeVar

KEY_WIDTH = 7


class HasOdometer(Protocol):
    def odometer_value(self) -> float: ...


class ComparatorError(ValueError):
    """Raised when a record's odometer cannot produce a comparator key."""


Comparator = Callable[[HasOdometer], str]

R = TypeVar("R")


def odometer_key(record: HasOdometer) -> str:
    """
    Comparator key: integer odometer, zero-padded to KEY_WIDTH digits.

    Works for Road Trip fuel records and LubeLogger gas records alike, so both
    sides of a sync derive keys the same way. Readings past 9,999,999 widen the
    key rather than being cut.
    """
    try:
        value = float(record.odometer_value())
    except (TypeError, ValueError) as e:
        raise ComparatorError(f"unreadable odometer: {e}") from e
    if not math.isfinite(value):
        raise ComparatorError(f"odometer is not finite: {value}")
    if value < 0:
        raise ComparatorError(f"odometer is negative: {value}")
    return f"{int(value):0{KEY_WIDTH}d}"


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class LookupResult(Generic[R]):
    status: LookupStatus
    record: Optional[R] = None
    error: Optional[Exception] = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND


class GasRecordIndex(Generic[R]):
    """
    Key lookup over a destination record set.

    Records are indexed in the order given; the first record wins when several
    share a key. A record whose key cannot be derived stops indexing there:
    keys seen before it still resolve, any other lookup reports the error.
    """

    def __init__(self, records: Iterable[R], comparator: Comparator = odometer_key):
        self.comparator = comparator
        self._by_key: Dict[str, R] = {}
        self._error: Optional[ComparatorError] = None
        for pos, record in enumerate(records):
            try:
                key = comparator(record)
            except ComparatorError as e:
                self._error = ComparatorError(f"destination record #{pos}: {e}")
                break
            self._by_key.setdefault(key, record)

    def find(self, key: str) -> LookupResult[R]:
        if key in self._by_key:
            return LookupResult(LookupStatus.FOUND, record=self._by_key[key])
        if self._error is not None:
            return LookupResult(LookupStatus.ERROR, error=self._error)
        return LookupResult(LookupStatus.NOT_FOUND)
