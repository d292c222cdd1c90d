from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from .config import AppConfig, ConfigError, load_config
from .lubelogger.client import LubeLoggerClient, LubeLoggerError
from .lubelogger.models import Vehicle
from .pipeline.sync import print_sync_report, sync_vehicle
from .roadtrip.loaders import SourceFormatError, load_fuel_records

console = Console()


def _load_config_or_exit(config_path: Path) -> AppConfig:
    try:
        return load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Config error:[/red] {escape(str(e))}")
        sys.exit(2)


def _list_vehicles(client: LubeLoggerClient) -> Optional[List[Vehicle]]:
    try:
        return client.get_vehicles()
    except LubeLoggerError as e:
        console.print(f"[red]Error loading LubeLogger vehicles:[/red] {escape(str(e))}")
        return None


def cmd_sync(args: argparse.Namespace) -> int:
    cfg = _load_config_or_exit(Path(args.config))
    csv_dir = Path(args.csv_path or cfg.roadtrip.csv_path)
    client = LubeLoggerClient(cfg.lubelogger)

    console.print(f"[bold]LubeLogger:[/bold] {cfg.lubelogger.api_url}")
    console.print(f"[bold]Road Trip CSV directory:[/bold] {csv_dir}")

    vehicles = _list_vehicles(client)
    if vehicles is None:
        return 1
    console.print(f"[bold]Vehicles:[/bold] {len(vehicles)}")

    failed = 0
    for vehicle in vehicles:
        if args.vehicle is not None and vehicle.id != args.vehicle:
            continue
        filename = vehicle.csv_filename()
        console.print(
            f"[cyan]Vehicle[/cyan] {vehicle.id} {escape(vehicle.label())} "
            f"filename={escape(filename) or '-'}"
        )
        if not filename:
            continue

        csv_file = csv_dir / filename
        try:
            fuel_records = load_fuel_records(csv_file)
        except (FileNotFoundError, SourceFormatError) as e:
            console.print(f"[red]Error loading Road Trip export[/red] {csv_file}: {escape(str(e))}")
            failed += 1
            continue

        try:
            result = sync_vehicle(
                client,
                vehicle.id,
                fuel_records,
                dry_run=args.dry_run,
                skip_duplicate_keys=cfg.sync.skip_duplicate_keys,
                verbose=args.verbose,
            )
        except LubeLoggerError as e:
            console.print(
                f"[red]Error syncing fuel records[/red] vehicle={vehicle.id}: {escape(str(e))}"
            )
            failed += 1
            continue

        print_sync_report(result, label=vehicle.label())
        if result.halted or result.classify_error:
            failed += 1

    return 1 if failed else 0


def cmd_vehicles(args: argparse.Namespace) -> int:
    cfg = _load_config_or_exit(Path(args.config))
    vehicles = _list_vehicles(LubeLoggerClient(cfg.lubelogger))
    if vehicles is None:
        return 1
    for vehicle in vehicles:
        filename = escape(vehicle.csv_filename()) or "[dim]no Road Trip export[/dim]"
        console.print(f"{vehicle.id:>5}  {escape(vehicle.label())}  {filename}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rt2ll",
        description="Copy Road Trip fuel records into LubeLogger.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # sync
    p_sync = sub.add_parser("sync", help="Insert Road Trip fillups missing from LubeLogger")
    p_sync.add_argument("--config", type=str, default="config.yml", help="Path to config.yml")
    p_sync.add_argument("--csv-path", type=str, help="Override the Road Trip CSV directory")
    p_sync.add_argument("--vehicle", type=int, help="Only sync this LubeLogger vehicle id")
    p_sync.add_argument("--dry-run", action="store_true", help="Report missing fillups without inserting")
    p_sync.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    p_sync.set_defaults(func=cmd_sync)

    # vehicles
    p_veh = sub.add_parser("vehicles", help="List LubeLogger vehicles and their Road Trip exports")
    p_veh.add_argument("--config", type=str, default="config.yml", help="Path to config.yml")
    p_veh.set_defaults(func=cmd_vehicles)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except SystemExit:
        raise
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
