"""Per-entity engine registry.

Each tracked entity (a page, host or token, identified by an opaque key
supplied by the caller) gets its own SignalEngine. Engines share no state.

The registry:
1. Lazily creates engines, restoring a stored snapshot when one exists
2. Applies per-entity configuration overrides
3. Routes price samples and reset requests to the right engine
4. Persists snapshots after mutations (when autosave is on)
"""

import logging

from signal_core.engine import EngineUpdate, SignalCallback, SignalEngine
from signal_core.models import EngineSnapshot, EngineView

from signal_app.overlay_config import OverlayConfig
from signal_app.storage import SnapshotStore

logger = logging.getLogger(__name__)


class EngineRegistry:
    """Own one SignalEngine per entity key."""

    def __init__(
        self,
        overlay_config: OverlayConfig | None = None,
        store: SnapshotStore | None = None,
        autosave: bool = True,
    ):
        """
        Args:
            overlay_config: Presets and per-entity overrides
            store: Optional snapshot store (None disables persistence)
            autosave: Persist the entity after every mutation
        """
        self.overlay_config = overlay_config or OverlayConfig()
        self.store = store
        self.autosave = autosave and store is not None

        self._engines: dict[str, SignalEngine] = {}

        # Applied to every engine, including ones created later
        self._signal_callbacks: list[SignalCallback] = []

    def on_signal(self, callback: SignalCallback) -> None:
        """Register a signal-change callback on all current and future engines."""
        if callback not in self._signal_callbacks:
            self._signal_callbacks.append(callback)
            for engine in self._engines.values():
                engine.on_signal(callback)

    def off_signal(self, callback: SignalCallback) -> None:
        if callback in self._signal_callbacks:
            self._signal_callbacks.remove(callback)
            for engine in self._engines.values():
                engine.off_signal(callback)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def keys(self) -> list[str]:
        """Live entity keys plus any persisted in the store."""
        keys = set(self._engines)
        if self.store is not None:
            keys.update(self.store.keys())
        return sorted(keys)

    def __contains__(self, key: str) -> bool:
        return key in self._engines

    def __len__(self) -> int:
        return len(self._engines)

    def get(self, key: str) -> SignalEngine | None:
        """Get a live engine, loading it from the store if persisted."""
        engine = self._engines.get(key)
        if engine is not None:
            return engine
        if self.store is None:
            return None
        snapshot = self.store.load(key)
        if snapshot is None:
            return None
        return self._install(key, snapshot)

    def get_or_create(self, key: str) -> SignalEngine:
        engine = self.get(key)
        if engine is None:
            engine = self._install(key, None)
        return engine

    def build(self, key: str) -> SignalEngine:
        """A configured engine for ``key`` that is not registered."""
        engine = SignalEngine(self.overlay_config.config_for(key), name=key)
        for callback in self._signal_callbacks:
            engine.on_signal(callback)
        return engine

    def _install(self, key: str, snapshot: EngineSnapshot | None) -> SignalEngine:
        engine = self.build(key)
        if snapshot is not None:
            engine.restore(snapshot)
        self._register(key, engine, restored=snapshot is not None)
        return engine

    def _register(self, key: str, engine: SignalEngine, restored: bool = False) -> None:
        self._engines[key] = engine
        logger.info(
            f"Tracking entity {key} "
            f"({'restored' if restored else 'new'}, "
            f"simulate={engine.simulation_enabled})"
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def submit_price(
        self,
        key: str,
        value: float,
        timestamp: int | None = None,
        persist: bool = True,
    ) -> EngineUpdate | None:
        """Route a price sample. Returns None if the sample was rejected.

        A rejected sample for an untracked key does not start tracking it.
        Pass ``persist=False`` to skip autosave (the caller saves instead).
        """
        engine = self.get(key)
        if engine is None:
            engine = self.build(key)
            update = engine.submit_price(value, timestamp)
            if update is None:
                return None
            self._register(key, engine)
        else:
            update = engine.submit_price(value, timestamp)
        if update is not None and persist:
            self._autosave(key)
        return update

    def view(self, key: str) -> EngineView | None:
        engine = self.get(key)
        return engine.view() if engine is not None else None

    def snapshot(self, key: str) -> EngineSnapshot | None:
        engine = self.get(key)
        return engine.snapshot() if engine is not None else None

    def restore(
        self, key: str, snapshot: EngineSnapshot, persist: bool = True
    ) -> SignalEngine:
        engine = self.get_or_create(key)
        engine.restore(snapshot)
        if persist:
            self._autosave(key)
        return engine

    def reset(self, key: str, persist: bool = True) -> bool:
        engine = self.get(key)
        if engine is None:
            return False
        engine.reset()
        if persist:
            self._autosave(key)
        return True

    def reset_simulation(
        self,
        key: str,
        start_balance: float | None = None,
        persist: bool = True,
    ) -> bool:
        engine = self.get(key)
        if engine is None:
            return False
        engine.reset_simulation(start_balance)
        if persist:
            self._autosave(key)
        return True

    def set_simulation_enabled(self, key: str, enabled: bool) -> SignalEngine:
        engine = self.get_or_create(key)
        engine.set_simulation_enabled(enabled)
        return engine

    def drop(self, key: str, delete_stored: bool = True) -> bool:
        """Stop tracking an entity and delete its stored snapshot."""
        removed = self._engines.pop(key, None) is not None
        if self.store is not None and delete_stored:
            removed = self.store.delete(key) or removed
        if removed:
            logger.info(f"Dropped entity {key}")
        return removed

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _autosave(self, key: str) -> None:
        if self.autosave:
            self.persist(key)

    def persist(self, key: str) -> bool:
        if self.store is None:
            return False
        engine = self._engines.get(key)
        if engine is None:
            return False
        return self.store.save(key, engine.snapshot())

    def persist_all(self) -> int:
        """Persist every live engine. Returns the number saved."""
        if self.store is None:
            return 0
        saved = sum(1 for key in list(self._engines) if self.persist(key))
        logger.info(f"Persisted {saved}/{len(self._engines)} engine snapshots")
        return saved
