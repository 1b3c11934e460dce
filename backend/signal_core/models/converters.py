"""Converters between hot path dataclasses and cold path Pydantic models."""

from signal_core.models.series import PricePoint
from signal_core.models.simulation import PortfolioPoint, Trade
from signal_core.models.snapshot import (
    PortfolioPointModel,
    PricePointModel,
    TradeModel,
)


def point_to_model(point: PricePoint) -> PricePointModel:
    return PricePointModel(timestamp=point.timestamp, value=point.value)


def model_to_point(model: PricePointModel) -> PricePoint:
    return PricePoint(timestamp=model.timestamp, value=model.value)


def trade_to_model(trade: Trade) -> TradeModel:
    return TradeModel(type=trade.type, price=trade.price, timestamp=trade.timestamp)


def model_to_trade(model: TradeModel) -> Trade:
    return Trade(type=model.type, price=model.price, timestamp=model.timestamp)


def portfolio_to_model(point: PortfolioPoint) -> PortfolioPointModel:
    return PortfolioPointModel(timestamp=point.timestamp, value=point.value)


def model_to_portfolio(model: PortfolioPointModel) -> PortfolioPoint:
    return PortfolioPoint(timestamp=model.timestamp, value=model.value)
