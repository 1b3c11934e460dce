"""Streaming signal engine for one tracked entity.

Data flow per price sample:
    RollingSeries.push -> IndicatorEngine.update -> SignalDecider.evaluate
    -> PaperTradingSimulator.on_signal (when simulation is enabled)

The engine is synchronous and owns all of its state. Hosts tracking many
entities create one engine per entity key; engines share nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from pydantic import ValidationError

from signal_core.indicators import IndicatorEngine
from signal_core.models import (
    EngineConfig,
    EngineSnapshot,
    EngineView,
    IndicatorSnapshot,
    RollingSeries,
    Signal,
    SimulationSnapshot,
    SimulationView,
    Trade,
    is_valid_price,
    model_to_point,
    model_to_portfolio,
    model_to_trade,
    now_ms,
    point_to_model,
    portfolio_to_model,
    to_timestamp,
    trade_to_model,
)
from signal_core.simulator import PaperTradingSimulator
from signal_core.strategy import SignalDecider

logger = logging.getLogger(__name__)

RECENT_TRADES = 10


@dataclass(frozen=True, slots=True)
class EngineUpdate:
    """Result of one accepted price sample."""

    price: float
    timestamp: int
    ema_short: float | None
    ema_long: float | None
    rsi: float | None
    signal: Signal
    previous_signal: Signal
    trade: Trade | None = None

    @property
    def changed(self) -> bool:
        return self.signal != self.previous_signal


# Called with each update whose signal differs from the previous one
SignalCallback = Callable[[EngineUpdate], None]


class SignalEngine:
    """Rolling history, indicators, signal state and paper portfolio for one entity."""

    def __init__(self, config: EngineConfig | None = None, name: str = ""):
        self.config = config or EngineConfig()
        self.name = name

        self.series = RollingSeries(self.config.max_history)
        self.indicators = IndicatorEngine(
            ema_short_period=self.config.ema_short_period,
            ema_long_period=self.config.ema_long_period,
            rsi_period=self.config.rsi_period,
        )
        self.decider = SignalDecider(
            policy=self.config.crossover_policy,
            rsi_buy_threshold=self.config.rsi_buy_threshold,
            rsi_sell_threshold=self.config.rsi_sell_threshold,
        )
        self.simulator = PaperTradingSimulator(
            start_balance=self.config.sim_start_balance,
            max_history=self.config.max_history,
        )

        self._signal = Signal.WARMUP
        self._callbacks: list[SignalCallback] = []

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def signal(self) -> Signal:
        return self._signal

    @property
    def simulation_enabled(self) -> bool:
        return self.config.simulate_trading

    @property
    def _label(self) -> str:
        return self.name or "engine"

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def on_signal(self, callback: SignalCallback) -> None:
        """Register callback for signal changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def off_signal(self, callback: SignalCallback) -> None:
        """Unregister callback for signal changes."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    # ------------------------------------------------------------------
    # Core logic
    # ------------------------------------------------------------------

    def submit_price(self, value: float, timestamp: int | None = None) -> EngineUpdate | None:
        """Feed one price sample through the pipeline.

        Samples must arrive in non-decreasing timestamp order; the price
        source is responsible for that.

        Args:
            value: Price; non-finite or non-positive values are rejected
            timestamp: Sample time in ms (defaults to now); non-numeric or
                non-finite timestamps reject the sample

        Returns:
            EngineUpdate, or None if the sample was rejected (state unchanged)
        """
        if not is_valid_price(value):
            logger.debug(f"{self._label}: rejected price {value!r}")
            return None

        ts = now_ms() if timestamp is None else to_timestamp(timestamp)
        if ts is None:
            logger.debug(f"{self._label}: rejected timestamp {timestamp!r}")
            return None

        price = float(value)

        self.series.push(price, ts)
        state = self.indicators.update(self.series)
        signal = self.decider.evaluate(state.ema_short, state.ema_long, state.rsi)

        trade = None
        if self.config.simulate_trading:
            trades_before = len(self.simulator.state.trades)
            self.simulator.on_signal(signal, price, ts)
            if len(self.simulator.state.trades) > trades_before:
                trade = self.simulator.state.trades[0]

        previous = self._signal
        self._signal = signal

        update = EngineUpdate(
            price=price,
            timestamp=ts,
            ema_short=state.ema_short,
            ema_long=state.ema_long,
            rsi=state.rsi,
            signal=signal,
            previous_signal=previous,
            trade=trade,
        )

        if update.changed:
            logger.info(
                f"{self._label}: {previous.value} -> {signal.value} @ {price} "
                f"short={state.ema_short} long={state.ema_long} rsi={state.rsi}"
            )
            for callback in list(self._callbacks):
                try:
                    callback(update)
                except Exception as e:
                    logger.error(f"{self._label}: signal callback error: {e}")

        return update

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Clear price history and indicator/signal state. Simulation is kept."""
        self.series.clear()
        self.indicators.reset()
        self.decider.reset()
        self._signal = Signal.WARMUP
        logger.info(f"{self._label}: price history reset")

    def reset_simulation(self, start_balance: float | None = None) -> None:
        """Re-seed the paper portfolio without touching price history."""
        if start_balance is not None:
            self.config = EngineConfig(
                **{**self.config.model_dump(), "sim_start_balance": start_balance}
            )
        self.simulator.reset(self.config.sim_start_balance)
        logger.info(
            f"{self._label}: simulation reset to {self.config.sim_start_balance:.2f}"
        )

    def set_simulation_enabled(self, enabled: bool) -> None:
        self.config = self.config.model_copy(update={"simulate_trading": bool(enabled)})

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> EngineSnapshot:
        """Serializable state: price history, EMAs and simulation."""
        sim = self.simulator.state
        state = self.indicators.state
        return EngineSnapshot(
            price_history=[point_to_model(p) for p in self.series],
            simulation=SimulationSnapshot(
                balance=sim.balance,
                holdings=sim.holdings,
                trades=[trade_to_model(t) for t in sim.trades],
                portfolio_history=[portfolio_to_model(p) for p in sim.portfolio_history],
            ),
            indicator_state=IndicatorSnapshot(
                ema_short=state.ema_short,
                ema_long=state.ema_long,
            ),
        )

    def restore(self, snapshot: EngineSnapshot) -> None:
        """Re-seed history, indicators and simulation from a snapshot.

        Signal transitions are not replayed; the signal is WARMUP until the
        next price. Non-positive history values are dropped and only the
        newest ``max_history`` points are kept.
        """
        series = RollingSeries(self.config.max_history)
        for model in snapshot.price_history:
            point = model_to_point(model)
            if is_valid_price(point.value):
                series.push(point.value, point.timestamp)

        ema_short = snapshot.indicator_state.ema_short
        ema_long = snapshot.indicator_state.ema_long

        sim = snapshot.simulation
        trades = [model_to_trade(t) for t in sim.trades]
        history = [model_to_portfolio(p) for p in sim.portfolio_history]

        # Everything validated and built; swap in
        self.series = series
        self.indicators.seed(ema_short, ema_long, series)
        self.decider.seed(ema_short, ema_long)
        self.simulator.restore(sim.balance, sim.holdings, trades, history)
        self._signal = Signal.WARMUP

        logger.info(
            f"{self._label}: restored {len(series)} points, "
            f"{len(trades)} trades, balance={sim.balance:.2f} holdings={sim.holdings}"
        )

    @classmethod
    def from_snapshot(
        cls,
        snapshot: EngineSnapshot,
        config: EngineConfig | None = None,
        name: str = "",
    ) -> SignalEngine:
        engine = cls(config, name=name)
        engine.restore(snapshot)
        return engine

    @classmethod
    def from_snapshot_data(
        cls,
        data: dict | str | bytes | None,
        config: EngineConfig | None = None,
        name: str = "",
    ) -> SignalEngine:
        """Restore from raw JSON (dict, str or bytes).

        Malformed data is logged and a fresh engine is returned instead.
        """
        if data is None:
            return cls(config, name=name)
        try:
            if isinstance(data, (str, bytes)):
                snapshot = EngineSnapshot.model_validate_json(data)
            else:
                snapshot = EngineSnapshot.model_validate(data)
        except ValidationError as e:
            logger.warning(
                f"{name or 'engine'}: invalid snapshot, starting fresh: "
                f"{e.error_count()} error(s)"
            )
            return cls(config, name=name)
        return cls.from_snapshot(snapshot, config, name=name)

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def view(self, recent_trades: int = RECENT_TRADES) -> EngineView:
        """Read-only snapshot for rendering."""
        price = self.series.last()
        first = self.series.first()
        state = self.indicators.state

        change_pct = None
        if price is not None and first:
            change_pct = (price - first) / first * 100

        simulation = None
        if self.config.simulate_trading:
            sim = self.simulator.state
            mark = price
            if mark is None:
                mark = sim.trades[0].price if sim.trades else 0.0
            value = sim.value_at(mark)
            simulation = SimulationView(
                balance=sim.balance,
                holdings=sim.holdings,
                portfolio_value=value,
                profit=value - self.simulator.start_balance,
                trade_count=len(sim.trades),
                recent_trades=[trade_to_model(t) for t in list(sim.trades)[:recent_trades]],
            )

        return EngineView(
            price=price,
            ema_short=state.ema_short,
            ema_long=state.ema_long,
            rsi=state.rsi,
            signal=self._signal,
            history_size=len(self.series),
            change_pct=change_pct,
            simulation=simulation,
        )
