"""Technical indicators for the streaming signal engine.

EMAs are maintained incrementally: seeded once from a simple average of
the most recent points, then advanced by one step per new price. RSI is
stateless and recomputed from the trailing ``period + 1`` points on every
call. All arithmetic is 64-bit float; rounding happens only at display time.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from signal_core.models.series import RollingSeries


def init_ema(values: Sequence[float], period: int) -> float | None:
    """Seed an EMA with the mean of the last ``min(period, len(values))`` values.

    This is a simple moving average, not a true EMA seed; it is the
    warm-up policy and lets the EMA exist from the very first price.

    Returns:
        The seed value, or None if there are no values
    """
    if period <= 0:
        raise ValueError("period must be > 0")
    if len(values) == 0:
        return None

    arr = np.asarray(values, dtype=np.float64)
    return float(np.mean(arr[-period:]))


def update_ema(prev_ema: float, new_price: float, period: int) -> float:
    """Advance an EMA by one price: ``(price - prev) * k + prev``, ``k = 2/(period+1)``."""
    k = 2.0 / (period + 1)
    return (new_price - prev_ema) * k + prev_ema


def compute_rsi(values: Sequence[float], period: int = 14) -> float | None:
    """Relative Strength Index over the last ``period + 1`` values.

    Gains and losses are plain sums over the window divided by ``period``
    (no Wilder smoothing). When the average loss is zero the RSI saturates
    at 100, including a completely flat window.

    Returns:
        RSI in [0, 100], or None if fewer than ``period + 1`` values
    """
    if period <= 0:
        raise ValueError("period must be > 0")
    if len(values) < period + 1:
        return None

    window = np.asarray(values, dtype=np.float64)[-(period + 1):]
    deltas = np.diff(window)
    gains = float(deltas[deltas > 0].sum())
    losses = float(-deltas[deltas < 0].sum())

    avg_gain = gains / period
    avg_loss = losses / period
    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


@dataclass(frozen=True, slots=True)
class IndicatorState:
    """Current indicator values; None means not yet computable."""

    ema_short: float | None = None
    ema_long: float | None = None
    rsi: float | None = None


class IndicatorEngine:
    """Incremental EMA(short), EMA(long) and windowed RSI over a RollingSeries.

    Call :meth:`update` exactly once after each accepted push.
    """

    def __init__(
        self,
        ema_short_period: int = 12,
        ema_long_period: int = 26,
        rsi_period: int = 14,
    ):
        self.ema_short_period = ema_short_period
        self.ema_long_period = ema_long_period
        self.rsi_period = rsi_period

        self._ema_short: float | None = None
        self._ema_long: float | None = None
        self._rsi: float | None = None

    @property
    def state(self) -> IndicatorState:
        return IndicatorState(
            ema_short=self._ema_short,
            ema_long=self._ema_long,
            rsi=self._rsi,
        )

    def _advance(self, prev: float | None, series: RollingSeries, period: int) -> float | None:
        if prev is None:
            return init_ema(series.tail(period), period)
        price = series.last()
        if price is None:
            return prev
        return update_ema(prev, price, period)

    def update(self, series: RollingSeries) -> IndicatorState:
        """Recompute indicators after a new price has been pushed."""
        if len(series) == 0:
            return self.state

        self._ema_short = self._advance(self._ema_short, series, self.ema_short_period)
        self._ema_long = self._advance(self._ema_long, series, self.ema_long_period)
        self._rsi = compute_rsi(series.tail(self.rsi_period + 1), self.rsi_period)
        return self.state

    def seed(
        self,
        ema_short: float | None,
        ema_long: float | None,
        series: RollingSeries | None = None,
    ) -> None:
        """Restore EMA state (e.g. from a snapshot) and recompute RSI from ``series``."""
        self._ema_short = ema_short
        self._ema_long = ema_long
        if series is not None:
            self._rsi = compute_rsi(series.tail(self.rsi_period + 1), self.rsi_period)
        else:
            self._rsi = None

    def reset(self) -> None:
        self._ema_short = None
        self._ema_long = None
        self._rsi = None
