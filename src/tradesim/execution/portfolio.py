"""
PortfolioService — сводка портфеля пользователя

Собирает позиции из HoldingsLedger, баланс из AccountLedger и оценивает
их по переданной price map (снапшот фида или QuoteBook).
"""

from typing import Mapping

from tradesim.core.domain.errors import StockNotFound
from tradesim.core.domain.portfolio import HoldingDetail, PortfolioSummary
from tradesim.core.math.portfolio import holding_pnl, total_pnl
from tradesim.ledger.accounts import AccountLedger
from tradesim.ledger.holdings import HoldingsLedger


class PortfolioService:
    """Read-only сводки портфеля."""

    def __init__(self, accounts: AccountLedger, holdings: HoldingsLedger):
        self.accounts = accounts
        self.holdings = holdings

    def get_portfolio_summary(self, user_id: str, prices: Mapping[str, float]) -> PortfolioSummary:
        """
        Сводка портфеля.

        Args:
            user_id: Пользователь
            prices: symbol → текущая цена (символы без цены оцениваются в 0)

        Returns:
            PortfolioSummary
        """
        holdings = self.holdings.get_holdings(user_id)
        totals = total_pnl(holdings, prices)
        return PortfolioSummary(
            holdings=holdings,
            total_value=totals.total_value,
            total_cost=totals.total_cost,
            total_pnl=totals.total_pnl,
            total_pnl_percent=totals.total_pnl_percent,
            cash_balance=self.accounts.get_balance(user_id),
        )

    def get_holding_detail(self, user_id: str, symbol: str, current_price: float) -> HoldingDetail:
        """
        Детали одной позиции.

        Raises:
            StockNotFound: если у пользователя нет позиции по символу
        """
        holding = self.holdings.get_holding(user_id, symbol)
        if holding is None:
            raise StockNotFound(symbol=symbol)

        pnl = holding_pnl(holding, current_price)
        return HoldingDetail(
            symbol=holding.symbol,
            quantity=holding.quantity,
            average_price=holding.average_price,
            current_price=current_price,
            unrealized_pnl=pnl.unrealized_pnl,
            pnl_percent=pnl.pnl_percent,
        )
