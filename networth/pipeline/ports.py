from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class Portfolio:
    id: str
    name: str
    currency: str = "GBP"
    type: str = "GIA"


@dataclass(frozen=True)
class Holding:
    symbol: str
    quantity: float


@dataclass(frozen=True)
class CashAccount:
    balance: float


@dataclass(frozen=True)
class HistoryPoint:
    timestamp: datetime
    close: float | None


class PortfolioStore(Protocol):
    def list_portfolios(self, user_id: str) -> list[Portfolio]: ...

    def belongs_to_user(self, portfolio_id: str, user_id: str) -> bool: ...


class HoldingStore(Protocol):
    def list_holdings(self, portfolio_id: str) -> list[Holding]: ...


class CashStore(Protocol):
    def list_cash_accounts(self, portfolio_id: str) -> list[CashAccount]: ...


class PriceHistoryProvider(Protocol):
    def get_history(
        self, symbol: str, range_keyword: str, deadline: float | None = None
    ) -> list[HistoryPoint]: ...
