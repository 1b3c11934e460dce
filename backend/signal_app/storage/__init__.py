"""Data storage layer."""

from signal_app.storage.snapshot_store import SnapshotStore

__all__ = [
    "SnapshotStore",
]
