"""
Sync: Reconcile one vehicle's Road Trip fuel records with LubeLogger.

For a single vehicle this pass:
- Loads the vehicle's current LubeLogger gas records (failure aborts the vehicle)
- Classifies each Road Trip fillup as present or missing by comparator key
- Transforms and inserts the missing fillups in source order, stopping the
  batch at the first failed record
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from rich.console import Console
from rich.markup import escape

from ..lubelogger.client import LubeLoggerError
from ..lubelogger.models import GasRecord, PostResponse
from ..reconcile.matcher import (
    Comparator,
    ComparatorError,
    GasRecordIndex,
    LookupResult,
    LookupStatus,
    odometer_key,
)
from ..reconcile.transformer import transform_fuel_record
from ..roadtrip.models import FuelRecord

console = Console()


class GasRecordStore(Protocol):
    def get_gas_records(self, vehicle_id: int) -> List[GasRecord]: ...

    def add_gas_record(self, vehicle_id: int, record: GasRecord) -> PostResponse: ...


@dataclass(frozen=True)
class QueuedRecord:
    source_index: int
    key: str
    record: FuelRecord


@dataclass(frozen=True)
class InsertOutcome:
    queue_index: int
    key: str
    message: str = ""


@dataclass(frozen=True)
class InsertFailure:
    queue_index: int
    key: str
    error: str


@dataclass
class SyncResult:
    vehicle_id: int
    source_count: int
    destination_count: int
    present: int = 0
    duplicates: int = 0
    dry_run: bool = False
    classify_error: Optional[str] = None
    queued: List[QueuedRecord] = field(default_factory=list)
    inserted: List[InsertOutcome] = field(default_factory=list)
    failure: Optional[InsertFailure] = None

    @property
    def halted(self) -> bool:
        return self.failure is not None

    @property
    def not_attempted(self) -> int:
        if self.dry_run:
            return len(self.queued)
        return len(self.queued) - len(self.inserted) - (1 if self.failure else 0)


def _lookup(index: GasRecordIndex, comparator: Comparator, rtf: FuelRecord) -> tuple[str, LookupResult]:
    try:
        key = comparator(rtf)
    except ComparatorError as e:
        return "", LookupResult(LookupStatus.ERROR, error=e)
    return key, index.find(key)


def sync_vehicle(
    client: GasRecordStore,
    vehicle_id: int,
    fuel_records: Sequence[FuelRecord],
    *,
    comparator: Comparator = odometer_key,
    dry_run: bool = False,
    skip_duplicate_keys: bool = False,
    verbose: bool = False,
) -> SyncResult:
    """
    Insert the Road Trip fillups LubeLogger does not have yet.

    Args:
        client: Gas record fetch/insert collaborator (LubeLoggerClient)
        vehicle_id: LubeLogger vehicle id
        fuel_records: Road Trip fillups in export order
        comparator: Identity key for both record kinds
        dry_run: Stop once the insert queue is built
        skip_duplicate_keys: Queue only the first source fillup per key

    Returns:
        SyncResult. Insert failures are reported there, not raised; only a
        failure to load the destination records raises.
    """
    gas_records = client.get_gas_records(vehicle_id)
    console.print(
        f"[cyan]Sync[/cyan] vehicle {vehicle_id}: {len(gas_records)} LubeLogger gas records, "
        f"{len(fuel_records)} Road Trip fillups"
    )

    result = SyncResult(
        vehicle_id=vehicle_id,
        source_count=len(fuel_records),
        destination_count=len(gas_records),
        dry_run=dry_run,
    )
    index = GasRecordIndex(gas_records, comparator=comparator)
    queued_keys = set()

    for i, rtf in enumerate(fuel_records):
        key, lookup = _lookup(index, comparator, rtf)

        if lookup.status is LookupStatus.ERROR:
            result.classify_error = f"source record #{i}: {lookup.error}"
            console.print(
                f"[red]Sync[/red] vehicle {vehicle_id}: classification stopped at "
                f"{escape(result.classify_error)}"
            )
            break

        if lookup.found:
            result.present += 1
            if verbose:
                console.print(f"[dim]  #{i} {key} found in LubeLogger[/dim]")
            continue

        if skip_duplicate_keys and key in queued_keys:
            result.duplicates += 1
            if verbose:
                console.print(f"[dim]  #{i} {key} already queued, skipping[/dim]")
            continue

        queued_keys.add(key)
        result.queued.append(QueuedRecord(source_index=i, key=key, record=rtf))
        if verbose:
            console.print(f"[dim]  #{i} {key} not in LubeLogger, enqueued[/dim]")

    console.print(
        f"[cyan]Sync[/cyan] vehicle {vehicle_id}: {len(result.queued)} missing fillups enqueued "
        f"(present={result.present})"
    )
    if dry_run:
        return result

    for qi, item in enumerate(result.queued):
        if verbose:
            console.print(f"[dim]  adding #{qi} {item.key} ({escape(item.record.date)})[/dim]")
        try:
            gas_record = transform_fuel_record(item.record)
            response = client.add_gas_record(vehicle_id, gas_record)
        except (ValueError, LubeLoggerError) as e:
            result.failure = InsertFailure(queue_index=qi, key=item.key, error=str(e))
        else:
            if response.success:
                result.inserted.append(
                    InsertOutcome(queue_index=qi, key=item.key, message=response.message)
                )
                continue
            result.failure = InsertFailure(
                queue_index=qi,
                key=item.key,
                error=f"rejected by LubeLogger: {response.message or 'no message'}",
            )

        console.print(
            f"[red]Failed adding fillup[/red] vehicle={vehicle_id} index={qi} key={item.key}: "
            f"{escape(result.failure.error)}"
        )
        console.print(
            f"[yellow]Sync[/yellow] vehicle {vehicle_id}: {result.not_attempted} queued fillups "
            "not attempted; re-run after fixing the failed record"
        )
        break

    console.print(
        f"[green]Sync complete[/green] vehicle {vehicle_id}: inserted={len(result.inserted)} "
        f"failed={1 if result.failure else 0} not_attempted={result.not_attempted}"
    )
    return result


def print_sync_report(result: SyncResult, label: str = "") -> None:
    """Print a formatted sync report for one vehicle."""
    console.print()
    console.print("=" * 60)
    console.print(f"  SYNC REPORT: vehicle {result.vehicle_id} {escape(label)}".rstrip())
    if result.dry_run:
        console.print("                  [DRY RUN MODE]", markup=False)
    console.print("=" * 60)
    console.print()

    console.print(f"Road Trip fillups:   {result.source_count}")
    console.print(f"LubeLogger records:  {result.destination_count}")
    console.print(f"Already present:     {result.present}")
    if result.duplicates:
        console.print(f"Duplicate keys:      {result.duplicates}")
    console.print(f"Queued:              {len(result.queued)}")
    console.print(f"Inserted:            {len(result.inserted)}")
    console.print(f"Not attempted:       {result.not_attempted}")
    console.print()

    if result.classify_error:
        console.print(f"[red]Classification stopped:[/red] {escape(result.classify_error)}")
        console.print()

    if result.failure:
        console.print("-" * 60)
        console.print("FAILED:")
        console.print("-" * 60)
        console.print(f"  queue #{result.failure.queue_index} (odometer {result.failure.key})")
        console.print(f"      {escape(result.failure.error)}")
        console.print()

    if result.dry_run and result.queued:
        console.print("-" * 60)
        console.print(f"WOULD INSERT ({len(result.queued)}):")
        console.print("-" * 60)
        for item in result.queued[:10]:
            console.print(
                f"  [{item.source_index}] {item.key}  {item.record.date}  {item.record.location}",
                markup=False,
            )
        if len(result.queued) > 10:
            console.print(f"  ... and {len(result.queued) - 10} more")
        console.print()

    console.print("=" * 60)
