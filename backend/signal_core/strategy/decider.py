"""Signal decision state machine.

Turns the current and previous EMA pair plus RSI into a discrete signal:

1. Either EMA undefined -> WARMUP (previous pair untouched)
2. EMA policy (edge-triggered crossover or level comparison)
3. RSI override: HOLD becomes BUY below the buy threshold, SELL above the
   sell threshold
4. Current pair becomes the previous pair for the next call

This module is pure business logic with no I/O dependencies.
"""

from signal_core.models.signal import CrossoverPolicy, Signal
from signal_core.strategy.registry import get_policy


def decide_signal(
    prev_short: float | None,
    prev_long: float | None,
    cur_short: float | None,
    cur_long: float | None,
    rsi: float | None,
    policy: CrossoverPolicy = CrossoverPolicy.EDGE_TRIGGERED,
    rsi_buy_threshold: float = 25.0,
    rsi_sell_threshold: float = 75.0,
) -> Signal:
    """Pure transition function for a single evaluation."""
    if cur_short is None or cur_long is None:
        return Signal.WARMUP

    signal = get_policy(CrossoverPolicy(policy).value)(
        prev_short, prev_long, cur_short, cur_long
    )

    if signal == Signal.HOLD and rsi is not None:
        if rsi < rsi_buy_threshold:
            signal = Signal.BUY
        elif rsi > rsi_sell_threshold:
            signal = Signal.SELL

    return signal


class SignalDecider:
    """Stateful wrapper around :func:`decide_signal`.

    Remembers the last defined ``(ema_short, ema_long)`` pair for
    crossover comparison. WARMUP is the only initial state; there is no
    terminal state.
    """

    def __init__(
        self,
        policy: CrossoverPolicy = CrossoverPolicy.EDGE_TRIGGERED,
        rsi_buy_threshold: float = 25.0,
        rsi_sell_threshold: float = 75.0,
    ):
        self.policy = CrossoverPolicy(policy)
        self.rsi_buy_threshold = rsi_buy_threshold
        self.rsi_sell_threshold = rsi_sell_threshold

        # Previous EMA values for crossover detection
        self._prev_short: float | None = None
        self._prev_long: float | None = None

    @property
    def previous(self) -> tuple[float | None, float | None]:
        return self._prev_short, self._prev_long

    def evaluate(
        self,
        ema_short: float | None,
        ema_long: float | None,
        rsi: float | None,
    ) -> Signal:
        """Decide the signal for the current indicator values."""
        if ema_short is None or ema_long is None:
            return Signal.WARMUP

        signal = decide_signal(
            self._prev_short,
            self._prev_long,
            ema_short,
            ema_long,
            rsi,
            policy=self.policy,
            rsi_buy_threshold=self.rsi_buy_threshold,
            rsi_sell_threshold=self.rsi_sell_threshold,
        )

        # Store only after the old pair has been consumed
        self._prev_short = ema_short
        self._prev_long = ema_long
        return signal

    def seed(self, prev_short: float | None, prev_long: float | None) -> None:
        """Set the previous pair, e.g. after restoring indicator state."""
        if prev_short is None or prev_long is None:
            self._prev_short = None
            self._prev_long = None
            return
        self._prev_short = prev_short
        self._prev_long = prev_long

    def reset(self) -> None:
        self._prev_short = None
        self._prev_long = None
