"""Paper-trading simulator driven by signal transitions.

Strict all-in/all-out, single asset:
- BUY while flat: spend the whole balance at the signal price
- SELL while holding: sell the whole position at the signal price
- Anything else is a no-op, so repeated identical signals never trade twice

Every accepted call appends a portfolio-value point, including no-ops.
There is no cooldown between opposite trades.
"""

import logging
from collections import deque
from typing import Iterable

from signal_core.models.series import is_valid_price, now_ms
from signal_core.models.signal import Signal
from signal_core.models.simulation import (
    PortfolioPoint,
    SimulationState,
    Trade,
    TradeSide,
)

logger = logging.getLogger(__name__)


class PaperTradingSimulator:
    """Virtual portfolio manager for one tracked entity."""

    def __init__(self, start_balance: float = 10000.0, max_history: int = 1200):
        if not start_balance >= 0:
            raise ValueError("start_balance must be >= 0")
        if max_history <= 0:
            raise ValueError("max_history must be > 0")
        self.start_balance = float(start_balance)
        self.max_history = max_history
        self.state = self._fresh_state()

    def _fresh_state(self) -> SimulationState:
        return SimulationState(
            balance=self.start_balance,
            holdings=0.0,
            trades=deque(),
            portfolio_history=deque(maxlen=self.max_history),
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def balance(self) -> float:
        return self.state.balance

    @property
    def holdings(self) -> float:
        return self.state.holdings

    @property
    def trades(self) -> list[Trade]:
        """Trades, newest first."""
        return list(self.state.trades)

    @property
    def portfolio_history(self) -> list[PortfolioPoint]:
        """Portfolio values, newest first."""
        return list(self.state.portfolio_history)

    def portfolio_value(self, price: float) -> float:
        return self.state.value_at(price)

    # ------------------------------------------------------------------
    # Core logic
    # ------------------------------------------------------------------

    def on_signal(self, signal: Signal, price: float, timestamp: int | None = None) -> None:
        """Apply a signal at ``price``.

        Non-finite or non-positive prices are ignored entirely: no trade and
        no portfolio entry.
        """
        if not is_valid_price(price):
            logger.debug(f"Simulator ignored invalid price: {price!r}")
            return

        price = float(price)
        if timestamp is None:
            timestamp = now_ms()
        state = self.state

        if signal == Signal.BUY and state.holdings == 0:
            if state.balance > 0:
                qty = state.balance / price
                state.trades.appendleft(
                    Trade(type=TradeSide.BUY, price=price, timestamp=timestamp)
                )
                state.holdings = qty
                state.balance = 0.0
                logger.info(f"Paper BUY {qty:.8f} @ {price}")

        elif signal == Signal.SELL and state.holdings > 0:
            proceeds = state.holdings * price
            state.trades.appendleft(
                Trade(type=TradeSide.SELL, price=price, timestamp=timestamp)
            )
            logger.info(f"Paper SELL {state.holdings:.8f} @ {price} -> {proceeds:.2f}")
            state.balance = proceeds
            state.holdings = 0.0

        state.portfolio_history.appendleft(
            PortfolioPoint(timestamp=timestamp, value=state.value_at(price))
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self, start_balance: float | None = None) -> None:
        """Discard trades and history and re-seed with the start balance."""
        if start_balance is not None:
            if not start_balance >= 0:
                raise ValueError("start_balance must be >= 0")
            self.start_balance = float(start_balance)
        self.state = self._fresh_state()

    def restore(
        self,
        balance: float,
        holdings: float,
        trades: Iterable[Trade] = (),
        portfolio_history: Iterable[PortfolioPoint] = (),
    ) -> None:
        """Replace state wholesale. Sequences are expected newest first."""
        self.state = SimulationState(
            balance=float(balance),
            holdings=float(holdings),
            trades=deque(trades),
            # Slice first: deque(iterable, maxlen) would keep the oldest tail
            portfolio_history=deque(
                list(portfolio_history)[: self.max_history],
                maxlen=self.max_history,
            ),
        )
