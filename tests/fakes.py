import time
from datetime import datetime

from networth.pipeline.errors import PriceDataUnavailable
from networth.pipeline.ports import CashAccount, Holding, HistoryPoint, Portfolio


def history(*rows):
    """[("2024-01-01", 100.0), ...] -> HistoryPoints at 14:30 on each day."""
    return [
        HistoryPoint(timestamp=datetime.fromisoformat(f"{day}T14:30:00"), close=close)
        for day, close in rows
    ]


class FakeStores:
    def __init__(self):
        self.owners = {}
        self.portfolios = {}
        self.holdings = {}
        self.cash = {}
        self.fail_holdings = set()

    def add_portfolio(self, user_id, portfolio_id, name, holdings=(), cash=()):
        self.owners[portfolio_id] = user_id
        self.portfolios[portfolio_id] = Portfolio(id=portfolio_id, name=name)
        self.holdings[portfolio_id] = [Holding(symbol=s, quantity=q) for s, q in holdings]
        self.cash[portfolio_id] = [CashAccount(balance=b) for b in cash]

    # PortfolioStore
    def list_portfolios(self, user_id):
        return [p for pid, p in self.portfolios.items() if self.owners[pid] == user_id]

    def belongs_to_user(self, portfolio_id, user_id):
        return self.owners.get(portfolio_id) == user_id

    # HoldingStore
    def list_holdings(self, portfolio_id):
        if portfolio_id in self.fail_holdings:
            raise RuntimeError("db down")
        return list(self.holdings.get(portfolio_id, []))

    # CashStore
    def list_cash_accounts(self, portfolio_id):
        return list(self.cash.get(portfolio_id, []))


class FakePrices:
    def __init__(self, series=None, failing=(), slow=None, delay=0.0):
        self.series = series or {}
        self.failing = set(failing)
        self.slow = set(slow or ())
        self.delay = delay
        self.calls = []
        self.deadlines = []

    def get_history(self, symbol, range_keyword, deadline=None):
        self.calls.append((symbol, range_keyword))
        self.deadlines.append(deadline)
        if symbol in self.slow:
            time.sleep(self.delay)
        if symbol in self.failing:
            raise RuntimeError(f"{symbol} delisted")
        if symbol not in self.series:
            raise PriceDataUnavailable(symbol)
        return list(self.series[symbol])
