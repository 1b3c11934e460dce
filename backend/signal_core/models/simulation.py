"""Paper-trading state models.

Trades and portfolio history are stored newest first.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum


class TradeSide(str, Enum):
    """Simulated trade direction."""

    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True, slots=True)
class Trade:
    """A simulated fill. Immutable once recorded."""

    type: TradeSide
    price: float
    timestamp: int  # Unix timestamp in milliseconds


@dataclass(frozen=True, slots=True)
class PortfolioPoint:
    """Portfolio value (balance + holdings * price) at a point in time."""

    timestamp: int
    value: float


@dataclass(slots=True)
class SimulationState:
    """Virtual single-asset portfolio.

    All-in/all-out: right after a trade exactly one of ``balance`` and
    ``holdings`` is non-zero.
    """

    balance: float = 0.0
    holdings: float = 0.0
    trades: deque[Trade] = field(default_factory=deque)
    portfolio_history: deque[PortfolioPoint] = field(default_factory=deque)

    @property
    def in_position(self) -> bool:
        return self.holdings > 0

    def value_at(self, price: float) -> float:
        """Portfolio value marked at ``price``."""
        return self.balance + self.holdings * price
