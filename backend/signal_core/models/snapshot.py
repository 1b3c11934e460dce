"""Serializable engine snapshots (persistence) and read-only views (presentation).

Cold path models: Pydantic, validated on the way in, dumped to plain JSON
with ``model_dump(mode="json")``. Non-finite floats are rejected.
"""

from pydantic import BaseModel, ConfigDict, Field

from signal_core.models.signal import Signal
from signal_core.models.simulation import TradeSide


class PricePointModel(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    timestamp: int
    value: float


class TradeModel(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    type: TradeSide
    price: float = Field(gt=0)
    timestamp: int


class PortfolioPointModel(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    timestamp: int
    value: float


class SimulationSnapshot(BaseModel):
    """Persisted paper-trading state. Sequences are newest first."""

    model_config = ConfigDict(allow_inf_nan=False)

    balance: float = Field(default=0.0, ge=0)
    holdings: float = Field(default=0.0, ge=0)
    trades: list[TradeModel] = Field(default_factory=list)
    portfolio_history: list[PortfolioPointModel] = Field(default_factory=list)


class IndicatorSnapshot(BaseModel):
    """Persisted EMA state. RSI is recomputed from history, never stored."""

    model_config = ConfigDict(allow_inf_nan=False)

    ema_short: float | None = None
    ema_long: float | None = None


class EngineSnapshot(BaseModel):
    """Everything needed to re-seed an engine without replaying signals."""

    model_config = ConfigDict(allow_inf_nan=False)

    price_history: list[PricePointModel] = Field(default_factory=list)
    simulation: SimulationSnapshot = Field(default_factory=SimulationSnapshot)
    indicator_state: IndicatorSnapshot = Field(default_factory=IndicatorSnapshot)


class SimulationView(BaseModel):
    model_config = ConfigDict(frozen=True)

    balance: float
    holdings: float
    portfolio_value: float
    profit: float  # portfolio_value - start balance
    trade_count: int
    recent_trades: list[TradeModel]


class EngineView(BaseModel):
    """Read-only state consumed by rendering."""

    model_config = ConfigDict(frozen=True)

    price: float | None
    ema_short: float | None
    ema_long: float | None
    rsi: float | None
    signal: Signal
    history_size: int
    change_pct: float | None  # current price vs oldest retained price
    simulation: SimulationView | None = None
