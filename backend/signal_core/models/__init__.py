"""Data models."""

from signal_core.models.series import (
    PricePoint,
    RollingSeries,
    is_valid_price,
    now_ms,
    to_timestamp,
)
from signal_core.models.signal import CrossoverPolicy, Signal
from signal_core.models.simulation import (
    PortfolioPoint,
    SimulationState,
    Trade,
    TradeSide,
)
from signal_core.models.config import (
    EngineConfig,
    PRESET_CLASSIC,
    PRESET_STRICT,
    PRESETS,
    get_preset,
)
from signal_core.models.snapshot import (
    EngineSnapshot,
    EngineView,
    IndicatorSnapshot,
    PortfolioPointModel,
    PricePointModel,
    SimulationSnapshot,
    SimulationView,
    TradeModel,
)
from signal_core.models.converters import (
    point_to_model,
    model_to_point,
    trade_to_model,
    model_to_trade,
    portfolio_to_model,
    model_to_portfolio,
)

__all__ = [
    # Hot path (dataclass)
    "PricePoint",
    "RollingSeries",
    "now_ms",
    "is_valid_price",
    "to_timestamp",
    "Trade",
    "TradeSide",
    "PortfolioPoint",
    "SimulationState",
    # Enums
    "Signal",
    "CrossoverPolicy",
    # Configuration
    "EngineConfig",
    "PRESET_CLASSIC",
    "PRESET_STRICT",
    "PRESETS",
    "get_preset",
    # Cold path (Pydantic)
    "EngineSnapshot",
    "EngineView",
    "IndicatorSnapshot",
    "PortfolioPointModel",
    "PricePointModel",
    "SimulationSnapshot",
    "SimulationView",
    "TradeModel",
    # Converters
    "point_to_model",
    "model_to_point",
    "trade_to_model",
    "model_to_trade",
    "portfolio_to_model",
    "model_to_portfolio",
]
