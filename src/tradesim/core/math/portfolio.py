"""
Portfolio math — оценка позиций и портфеля

Чистые функции. Символы без цены в price map оцениваются в 0.
"""

from typing import Iterable, Mapping, NamedTuple

from tradesim.core.domain.holding import Holding


class HoldingPnL(NamedTuple):
    """PnL одной позиции."""

    unrealized_pnl: float
    pnl_percent: float


class TotalPnL(NamedTuple):
    """PnL портфеля."""

    total_pnl: float
    total_cost: float
    total_value: float
    total_pnl_percent: float


def holding_pnl(holding: Holding, current_price: float) -> HoldingPnL:
    """
    Нереализованный PnL позиции.

    Args:
        holding: Позиция
        current_price: Текущая цена

    Returns:
        HoldingPnL(unrealized_pnl, pnl_percent)
    """
    unrealized = (current_price - holding.average_price) * holding.quantity
    if holding.average_price == 0:
        return HoldingPnL(unrealized, 0.0)
    pct = (current_price - holding.average_price) / holding.average_price * 100
    return HoldingPnL(unrealized, pct)


def portfolio_value(holdings: Iterable[Holding], prices: Mapping[str, float]) -> float:
    """Рыночная стоимость позиций по price map."""
    return sum(prices.get(h.symbol, 0.0) * h.quantity for h in holdings)


def total_pnl(holdings: Iterable[Holding], prices: Mapping[str, float]) -> TotalPnL:
    """
    Суммарный PnL портфеля.

    Args:
        holdings: Позиции
        prices: symbol → текущая цена

    Returns:
        TotalPnL
    """
    holdings = list(holdings)
    cost = sum(h.cost_basis() for h in holdings)
    value = portfolio_value(holdings, prices)
    pnl = value - cost
    pct = 0.0 if cost == 0 else pnl / cost * 100
    return TotalPnL(total_pnl=pnl, total_cost=cost, total_value=value, total_pnl_percent=pct)
