"""
Portfolio — Модели сводки портфеля

Immutable Pydantic модели результата PortfolioService.
"""

from pydantic import BaseModel, Field

from .holding import Holding


class HoldingDetail(BaseModel):
    """Позиция с оценкой по текущей цене."""

    symbol: str = Field(..., min_length=1, description="Тикер")
    quantity: int = Field(..., gt=0, description="Количество акций")
    average_price: float = Field(..., gt=0, description="Средняя цена покупки")
    current_price: float = Field(..., gt=0, description="Текущая цена")
    unrealized_pnl: float = Field(..., description="Нереализованный PnL")
    pnl_percent: float = Field(..., description="PnL в процентах от средней цены")

    model_config = {"frozen": True}


class PortfolioSummary(BaseModel):
    """Сводка портфеля пользователя."""

    holdings: list[Holding] = Field(default_factory=list, description="Позиции")
    total_value: float = Field(..., ge=0, description="Рыночная стоимость позиций")
    total_cost: float = Field(..., ge=0, description="Стоимость покупки позиций")
    total_pnl: float = Field(..., description="Суммарный PnL")
    total_pnl_percent: float = Field(..., description="Суммарный PnL в процентах")
    cash_balance: float = Field(..., ge=0, description="Свободные денежные средства")

    model_config = {"frozen": True}
