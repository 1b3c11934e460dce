"""Technical indicators (pure math, no I/O)."""

from signal_core.indicators.indicators import (
    init_ema,
    update_ema,
    compute_rsi,
    IndicatorEngine,
    IndicatorState,
)

__all__ = [
    "init_ema",
    "update_ema",
    "compute_rsi",
    "IndicatorEngine",
    "IndicatorState",
]
