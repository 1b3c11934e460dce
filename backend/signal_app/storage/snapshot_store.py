"""File-backed snapshot store for engine state.

One JSON document per entity:
    {snapshot_dir}/{sha256(key)[:32]}.json -> {"key": ..., "snapshot": {...}}

Entity keys are opaque (URLs, hosts, token names), so file names are
hashed and the key is stored inside the document. Uses orjson for
serialization and an atomic replace on write.

Failures are logged and reported through return values; they never
raise into the engine.
"""

from __future__ import annotations

import contextlib
import hashlib
import logging
import os
import uuid
from pathlib import Path

import orjson
from pydantic import ValidationError

from signal_core.models import EngineSnapshot

logger = logging.getLogger(__name__)

FILE_SUFFIX = ".json"


def _file_name(key: str) -> str:
    """Deterministic file name for an entity key."""
    return hashlib.sha256(key.encode()).hexdigest()[:32] + FILE_SUFFIX


class SnapshotStore:
    """Persist and load EngineSnapshot documents by entity key."""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / _file_name(key)

    def save(self, key: str, snapshot: EngineSnapshot) -> bool:
        """Write a snapshot.

        Returns:
            True if saved successfully
        """
        document = {"key": key, "snapshot": snapshot.model_dump(mode="json")}
        path = self._path(key)
        tmp_path = path.with_name(f"{path.stem}.{uuid.uuid4().hex}.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(orjson.dumps(document))
            os.replace(tmp_path, path)
            return True
        except (OSError, TypeError) as e:
            logger.warning(f"Failed to save snapshot for {key}: {e}")
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            return False

    def load(self, key: str) -> EngineSnapshot | None:
        """Read a snapshot.

        Returns:
            EngineSnapshot, or None if missing or unreadable
        """
        path = self._path(key)
        if not path.exists():
            return None

        try:
            document = orjson.loads(path.read_bytes())
            return EngineSnapshot.model_validate(document["snapshot"])
        except (OSError, orjson.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
            logger.warning(f"Discarding unreadable snapshot for {key}: {e}")
            return None

    def delete(self, key: str) -> bool:
        """Remove a stored snapshot. Returns True if a file was deleted."""
        try:
            self._path(key).unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Failed to delete snapshot for {key}: {e}")
            return False

    def keys(self) -> list[str]:
        """Entity keys with a stored snapshot."""
        if not self.directory.exists():
            return []

        keys = []
        for path in sorted(self.directory.glob(f"*{FILE_SUFFIX}")):
            try:
                document = orjson.loads(path.read_bytes())
                keys.append(document["key"])
            except (OSError, orjson.JSONDecodeError, KeyError, TypeError) as e:
                logger.warning(f"Skipping unreadable snapshot file {path.name}: {e}")
        return keys
