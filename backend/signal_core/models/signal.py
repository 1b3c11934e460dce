"""Signal and decision policy enums."""

from enum import Enum


class Signal(str, Enum):
    """Discrete trading signal emitted by the decider."""

    WARMUP = "WARMUP"  # Indicators not yet defined
    HOLD = "HOLD"
    BUY = "BUY"
    SELL = "SELL"


class CrossoverPolicy(str, Enum):
    """How EMA(short) vs EMA(long) is turned into BUY/SELL."""

    # BUY/SELL only on the sample where the EMAs change relative ordering
    EDGE_TRIGGERED = "edge-triggered-crossover"
    # BUY while short > long, SELL while short < long, on every sample
    LEVEL_COMPARISON = "level-comparison"
