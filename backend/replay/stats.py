"""Statistics for a replayed price series.

Computes portfolio performance from the simulator's trade log and
portfolio-value history (both stored newest first).
"""

from __future__ import annotations

from dataclasses import dataclass

from signal_core.models import PortfolioPoint, Trade, TradeSide


@dataclass
class RoundTrip:
    """A BUY followed by the next SELL."""

    entry_price: float
    exit_price: float
    entry_time: int
    exit_time: int

    @property
    def return_pct(self) -> float:
        return (self.exit_price - self.entry_price) / self.entry_price * 100

    @property
    def is_win(self) -> bool:
        return self.exit_price > self.entry_price


@dataclass
class ReplayStats:
    start_balance: float
    final_value: float
    max_drawdown_pct: float
    round_trips: list[RoundTrip]
    open_position: bool

    @property
    def total_return_pct(self) -> float:
        if self.start_balance <= 0:
            return 0.0
        return (self.final_value - self.start_balance) / self.start_balance * 100

    @property
    def wins(self) -> int:
        return sum(1 for rt in self.round_trips if rt.is_win)

    @property
    def win_rate(self) -> float:
        total = len(self.round_trips)
        return (self.wins / total * 100) if total > 0 else 0.0


def pair_round_trips(trades: list[Trade]) -> list[RoundTrip]:
    """Pair BUY/SELL trades chronologically. ``trades`` is newest first."""
    trips: list[RoundTrip] = []
    entry: Trade | None = None
    for trade in reversed(trades):
        if trade.type == TradeSide.BUY:
            entry = trade
        elif trade.type == TradeSide.SELL and entry is not None:
            trips.append(
                RoundTrip(
                    entry_price=entry.price,
                    exit_price=trade.price,
                    entry_time=entry.timestamp,
                    exit_time=trade.timestamp,
                )
            )
            entry = None
    return trips


def max_drawdown_pct(history: list[PortfolioPoint]) -> float:
    """Largest peak-to-trough decline in percent. ``history`` is newest first."""
    peak = 0.0
    worst = 0.0
    for point in reversed(history):
        peak = max(peak, point.value)
        if peak > 0:
            worst = max(worst, (peak - point.value) / peak * 100)
    return worst


def calculate(
    start_balance: float,
    trades: list[Trade],
    history: list[PortfolioPoint],
) -> ReplayStats:
    final_value = history[0].value if history else start_balance
    return ReplayStats(
        start_balance=start_balance,
        final_value=final_value,
        max_drawdown_pct=max_drawdown_pct(history),
        round_trips=pair_round_trips(trades),
        open_position=bool(trades) and trades[0].type == TradeSide.BUY,
    )
