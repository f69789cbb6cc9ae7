"""
Holding — Позиция пользователя в одном символе

Immutable Pydantic модель. Запись существует только при quantity > 0:
позиция с нулевым количеством удаляется из HoldingsLedger, а не хранится.
"""

from pydantic import BaseModel, Field


class Holding(BaseModel):
    """
    Позиция в одном символе.

    average_price — средневзвешенная цена покупки. Пересчитывается на каждой
    покупке и не меняется при частичной продаже.
    """

    symbol: str = Field(..., min_length=1, description="Тикер")
    quantity: int = Field(..., gt=0, description="Количество акций")
    average_price: float = Field(..., gt=0, description="Средняя цена покупки")

    model_config = {"frozen": True, "allow_inf_nan": False}  # Immutable

    def cost_basis(self) -> float:
        """Суммарная стоимость покупки позиции."""
        return self.average_price * self.quantity

    def with_buy(self, quantity: int, price: float) -> "Holding":
        """
        Новая позиция после докупки.

        average = (old_avg × old_qty + price × qty) / (old_qty + qty)

        Args:
            quantity: Количество купленных акций
            price: Цена покупки

        Returns:
            Новый экземпляр Holding
        """
        new_quantity = self.quantity + quantity
        new_average = (self.average_price * self.quantity + price * quantity) / new_quantity
        return Holding(symbol=self.symbol, quantity=new_quantity, average_price=new_average)
