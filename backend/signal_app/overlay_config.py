"""Engine configuration loaded from overlay.yaml.

Supports:
- Preset selection: "classic", "strict", or "custom" (inline engine block)
- Per-entity overrides keyed by entity key
- Backward compatible: no YAML file = classic preset, no overrides
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, model_validator

from signal_core.models import EngineConfig, PRESETS, CrossoverPolicy

logger = logging.getLogger(__name__)


class EntityOverride(BaseModel):
    """Per-entity engine overrides. Unset fields inherit the base config."""

    key: str
    ema_short_period: int | None = None
    ema_long_period: int | None = None
    rsi_period: int | None = None
    max_history: int | None = None
    rsi_buy_threshold: float | None = None
    rsi_sell_threshold: float | None = None
    crossover_policy: CrossoverPolicy | None = None
    simulate_trading: bool | None = None
    sim_start_balance: float | None = None

    def apply(self, base: EngineConfig) -> EngineConfig:
        """Merge onto ``base`` and re-validate the result."""
        updates = self.model_dump(exclude={"key"}, exclude_none=True)
        return EngineConfig(**{**base.model_dump(), **updates})


_VALID_PRESETS = (*PRESETS.keys(), "custom")


class OverlayConfig(BaseModel):
    """Top-level overlay.yaml configuration."""

    preset: str = "classic"
    engine: dict[str, Any] = {}
    simulate_trading: bool = False
    entities: list[EntityOverride] = []

    @model_validator(mode="after")
    def _validate(self):
        if self.preset not in _VALID_PRESETS:
            raise ValueError(
                f"preset must be one of {_VALID_PRESETS}, got '{self.preset}'"
            )
        if self.preset == "custom" and not self.engine:
            raise ValueError("preset='custom' requires an 'engine' mapping")
        keys = [e.key for e in self.entities]
        if len(keys) != len(set(keys)):
            raise ValueError("entity keys in 'entities' must be unique")
        # Fail fast on invalid combinations
        base = self.get_engine_config()
        for entity in self.entities:
            entity.apply(base)
        return self

    def get_engine_config(self) -> EngineConfig:
        """Resolve preset selection to the base EngineConfig."""
        if self.preset == "custom":
            base = EngineConfig(**self.engine)
        else:
            base = PRESETS[self.preset]
        if self.simulate_trading and not base.simulate_trading:
            base = base.model_copy(update={"simulate_trading": True})
        return base

    def config_for(self, key: str) -> EngineConfig:
        """Engine config for one entity, with its overrides applied."""
        base = self.get_engine_config()
        for entity in self.entities:
            if entity.key == key:
                return entity.apply(base)
        return base


_DEFAULT_PATH = Path("overlay.yaml")


def load_overlay_config(path: Path | str | None = None) -> OverlayConfig:
    """Load overlay config from YAML file.

    Falls back to defaults (classic preset) if the file doesn't exist.
    """
    config_path = Path(path) if path else _DEFAULT_PATH

    env_path = config_path.parent / ".env"
    load_dotenv(env_path, override=False)

    if not config_path.exists():
        logger.info(
            "No overlay.yaml found at %s, using defaults (classic preset)",
            config_path,
        )
        return OverlayConfig()

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    config = OverlayConfig(**raw)
    logger.info(
        "Loaded overlay config: preset=%s, simulate=%s, %d entity override(s)",
        config.preset,
        config.simulate_trading,
        len(config.entities),
    )
    return config
