"""Engine configuration models and named presets."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, model_validator

from signal_core.models.signal import CrossoverPolicy


class EngineConfig(BaseModel):
    """Per-entity engine parameters.

    Invalid combinations raise at construction time, since they would
    otherwise produce a degenerate signal machine.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Indicator periods
    ema_short_period: int = 12
    ema_long_period: int = 26
    rsi_period: int = 14

    # Rolling history capacity (price points and portfolio history)
    max_history: int = 1200

    # RSI override thresholds (applied only when the EMA rule says HOLD)
    rsi_buy_threshold: float = 25.0
    rsi_sell_threshold: float = 75.0

    crossover_policy: CrossoverPolicy = CrossoverPolicy.EDGE_TRIGGERED

    # Paper trading
    simulate_trading: bool = False
    sim_start_balance: float = 10000.0

    @model_validator(mode="after")
    def _validate(self):
        if self.ema_short_period < 2:
            raise ValueError(
                f"ema_short_period must be >= 2, got {self.ema_short_period}"
            )
        if self.ema_long_period <= self.ema_short_period:
            raise ValueError(
                "ema_long_period must be greater than ema_short_period, got "
                f"long={self.ema_long_period} short={self.ema_short_period}"
            )
        if self.rsi_period < 2:
            raise ValueError(f"rsi_period must be >= 2, got {self.rsi_period}")
        if self.max_history < self.rsi_period + 1:
            raise ValueError(
                f"max_history must be >= rsi_period + 1 ({self.rsi_period + 1}), "
                f"got {self.max_history}"
            )
        if not self.sim_start_balance >= 0:
            raise ValueError(
                f"sim_start_balance must be >= 0, got {self.sim_start_balance}"
            )
        for name in ("rsi_buy_threshold", "rsi_sell_threshold"):
            value = getattr(self, name)
            if not 0 < value < 100:
                raise ValueError(f"{name} must be in (0, 100), got {value}")
        if self.rsi_buy_threshold >= self.rsi_sell_threshold:
            raise ValueError(
                "rsi_buy_threshold must be below rsi_sell_threshold, got "
                f"buy={self.rsi_buy_threshold} sell={self.rsi_sell_threshold}"
            )
        return self


# =============================================================================
# Classic: RSI 25/75 with a short 500 point history
# =============================================================================
PRESET_CLASSIC = EngineConfig(
    ema_short_period=12,
    ema_long_period=26,
    rsi_period=14,
    max_history=500,
    rsi_buy_threshold=25.0,
    rsi_sell_threshold=75.0,
)

# =============================================================================
# Strict: tighter RSI extremes (20/80) with the longer 1200 point history
# =============================================================================
PRESET_STRICT = EngineConfig(
    ema_short_period=12,
    ema_long_period=26,
    rsi_period=14,
    max_history=1200,
    rsi_buy_threshold=20.0,
    rsi_sell_threshold=80.0,
)

PRESETS: dict[str, EngineConfig] = {
    "classic": PRESET_CLASSIC,
    "strict": PRESET_STRICT,
}


def get_preset(name: str) -> EngineConfig:
    """Look up a preset by name.

    Raises:
        KeyError: If no preset is registered under the given name.
    """
    config = PRESETS.get(name)
    if config is None:
        available = ", ".join(sorted(PRESETS.keys()))
        raise KeyError(f"Unknown preset '{name}'. Available: {available}")
    return config
