"""Built-in EMA decision policies.

Both policies look only at EMA(short) vs EMA(long); the RSI override is
applied afterwards by the decider.
"""

from signal_core.models.signal import CrossoverPolicy, Signal
from signal_core.strategy.registry import register_policy


@register_policy(CrossoverPolicy.EDGE_TRIGGERED.value)
def edge_triggered_crossover(
    prev_short: float | None,
    prev_long: float | None,
    cur_short: float,
    cur_long: float,
) -> Signal:
    """BUY on an upward cross, SELL on a downward cross, HOLD otherwise."""
    # Need a previous pair to detect a cross
    if prev_short is None or prev_long is None:
        return Signal.HOLD

    prev_diff = prev_short - prev_long
    cur_diff = cur_short - cur_long

    # Bullish: short was at or below long, now strictly above
    if prev_diff <= 0 and cur_diff > 0:
        return Signal.BUY
    # Bearish: short was at or above long, now strictly below
    if prev_diff >= 0 and cur_diff < 0:
        return Signal.SELL
    return Signal.HOLD


@register_policy(CrossoverPolicy.LEVEL_COMPARISON.value)
def level_comparison(
    prev_short: float | None,
    prev_long: float | None,
    cur_short: float,
    cur_long: float,
) -> Signal:
    """BUY whenever short > long, SELL whenever short < long."""
    if cur_short > cur_long:
        return Signal.BUY
    if cur_short < cur_long:
        return Signal.SELL
    return Signal.HOLD
