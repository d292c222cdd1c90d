from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from rt2ll.lubelogger.client import LubeLoggerHttpError
from rt2ll.lubelogger.models import GasRecord, PostResponse
from rt2ll.pipeline.sync import sync_vehicle
from rt2ll.roadtrip.models import FuelRecord


class FakeLubeLogger:
    """In-memory gas record store; inserts show up in later fetches."""

    def __init__(
        self,
        records: Optional[List[GasRecord]] = None,
        fail_on_call: Optional[int] = None,
        responses: Optional[Dict[int, PostResponse]] = None,
    ):
        self.records = list(records or [])
        self.posted: List[GasRecord] = []
        self.calls = 0
        self.fail_on_call = fail_on_call
        self.responses = responses or {}

    def get_gas_records(self, vehicle_id: int) -> List[GasRecord]:
        return list(self.records)

    def add_gas_record(self, vehicle_id: int, record: GasRecord) -> PostResponse:
        self.calls += 1
        if self.calls == self.fail_on_call:
            raise LubeLoggerHttpError(500, "boom")
        if self.calls in self.responses:
            return self.responses[self.calls]
        self.posted.append(record)
        self.records.append(record.model_copy(update={"id": str(len(self.records) + 1)}))
        return PostResponse(success=True)


class UnreachableLubeLogger(FakeLubeLogger):
    def get_gas_records(self, vehicle_id: int) -> List[GasRecord]:
        raise LubeLoggerHttpError(0, "connection refused")


def _fuel(odometer: float, date: str = "2024-3-5") -> FuelRecord:
    return FuelRecord(odometer=odometer, date=date, fill_amount=10, total_price=30, price_per_unit=3)


def test_present_records_are_never_queued():
    client = FakeLubeLogger([GasRecord(id="1", odometer="100"), GasRecord(id="2", odometer="200")])
    result = sync_vehicle(client, 7, [_fuel(100.4), _fuel(150), _fuel(200)])
    assert result.present == 2
    assert [q.key for q in result.queued] == ["0000150"]
    assert [gr.odometer for gr in client.posted] == ["150"]
    assert len(result.inserted) == 1
    assert not result.halted


def test_queue_preserves_source_order():
    client = FakeLubeLogger()
    result = sync_vehicle(client, 7, [_fuel(300), _fuel(100), _fuel(200)])
    assert [q.source_index for q in result.queued] == [0, 1, 2]
    assert [gr.odometer for gr in client.posted] == ["300", "100", "200"]


def test_second_run_queues_nothing():
    client = FakeLubeLogger([GasRecord(id="1", odometer="100")])
    fuel = [_fuel(100), _fuel(150), _fuel(175.5)]
    first = sync_vehicle(client, 7, fuel)
    assert len(first.inserted) == 2
    second = sync_vehicle(client, 7, fuel)
    assert second.queued == []
    assert second.present == 3


def test_batch_halts_on_first_insert_failure():
    client = FakeLubeLogger(fail_on_call=2)
    result = sync_vehicle(client, 7, [_fuel(100), _fuel(200), _fuel(300)])
    assert len(result.inserted) == 1
    assert result.failure is not None
    assert result.failure.queue_index == 1
    assert result.failure.key == "0000200"
    assert "500" in result.failure.error
    assert result.not_attempted == 1
    assert client.calls == 2


def test_rejected_insert_halts_batch():
    client = FakeLubeLogger(responses={1: PostResponse(success=False, message="bad odometer")})
    result = sync_vehicle(client, 7, [_fuel(100), _fuel(200)])
    assert result.inserted == []
    assert "bad odometer" in result.failure.error
    assert result.not_attempted == 1
    assert client.calls == 1


def test_transform_failure_halts_batch():
    client = FakeLubeLogger()
    result = sync_vehicle(client, 7, [_fuel(100), _fuel(200, date="garbage"), _fuel(300)])
    assert len(result.inserted) == 1
    assert result.failure.queue_index == 1
    assert client.calls == 1
    assert result.not_attempted == 1


def test_loading_failure_raises():
    with pytest.raises(LubeLoggerHttpError):
        sync_vehicle(UnreachableLubeLogger(), 7, [_fuel(100)])


def test_classification_stops_at_malformed_destination_record():
    client = FakeLubeLogger([GasRecord(id="1", odometer="100"), GasRecord(id="2", odometer="oops")])
    result = sync_vehicle(client, 7, [_fuel(100), _fuel(150), _fuel(200)])
    assert result.present == 1
    assert result.queued == []
    assert "source record #1" in result.classify_error
    assert client.calls == 0


def test_classification_stops_at_invalid_source_odometer():
    client = FakeLubeLogger()
    result = sync_vehicle(client, 7, [_fuel(100), _fuel(-5), _fuel(200)])
    assert [q.key for q in result.queued] == ["0000100"]
    assert "source record #1" in result.classify_error
    assert len(client.posted) == 1


def test_dry_run_inserts_nothing():
    client = FakeLubeLogger([GasRecord(id="1", odometer="100")])
    result = sync_vehicle(client, 7, [_fuel(100), _fuel(200)], dry_run=True)
    assert [q.key for q in result.queued] == ["0000200"]
    assert client.calls == 0
    assert result.not_attempted == 1


def test_duplicate_source_keys_queue_twice_by_default():
    client = FakeLubeLogger()
    result = sync_vehicle(client, 7, [_fuel(100.2), _fuel(100.7)])
    assert len(result.queued) == 2


def test_skip_duplicate_keys_queues_first_only():
    client = FakeLubeLogger()
    result = sync_vehicle(client, 7, [_fuel(100.2), _fuel(100.7)], skip_duplicate_keys=True)
    assert len(result.queued) == 1
    assert result.duplicates == 1
    assert len(client.posted) == 1


def test_custom_comparator_is_used_for_both_sides():
    def by_date(record) -> str:
        return record.date

    client = FakeLubeLogger([GasRecord(id="1", odometer="999", date="2024-3-5")])
    result = sync_vehicle(client, 7, [_fuel(100, date="2024-3-5"), _fuel(200, date="2024-4-1")], comparator=by_date)
    assert result.present == 1
    assert [q.key for q in result.queued] == ["2024-4-1"]


def test_out_of_range_amount_halts_batch():
    client = FakeLubeLogger()
    huge = FuelRecord(odometer=200, date="2024-3-5", total_price=1e27)
    result = sync_vehicle(client, 7, [_fuel(100), huge, _fuel(300)])
    assert len(result.inserted) == 1
    assert result.failure.queue_index == 1
    assert result.not_attempted == 1
    assert client.calls == 1
