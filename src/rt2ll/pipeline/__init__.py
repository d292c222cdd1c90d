"""
Pipeline package: per-vehicle sync passes.
"""
from .sync import SyncResult, print_sync_report, sync_vehicle

__all__ = ["SyncResult", "print_sync_report", "sync_vehicle"]
