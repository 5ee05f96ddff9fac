import sqlite3
import uuid

from .pipeline.ports import CashAccount, Holding, Portfolio
from .utils import now_utc_iso


class SqlitePortfolioStore:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def list_portfolios(self, user_id: str) -> list[Portfolio]:
        rows = self.conn.execute(
            """
            SELECT id, name, currency, type FROM portfolios
            WHERE user_id=? AND is_active=1
            ORDER BY created_at_utc DESC, id
            """,
            (user_id,),
        ).fetchall()
        return [Portfolio(id=row[0], name=row[1], currency=row[2], type=row[3]) for row in rows]

    def belongs_to_user(self, portfolio_id: str, user_id: str) -> bool:
        row = self.conn.execute(
            "SELECT 1 FROM portfolios WHERE id=? AND user_id=?",
            (portfolio_id, user_id),
        ).fetchone()
        return row is not None

    def create(self, user_id: str, name: str, currency: str = "GBP", type: str = "GIA", portfolio_id: str | None = None) -> str:
        portfolio_id = portfolio_id or str(uuid.uuid4())
        self.conn.execute(
            "INSERT INTO portfolios(id, user_id, name, type, currency, is_active, created_at_utc) VALUES(?,?,?,?,?,1,?)",
            (portfolio_id, user_id, name, type, currency, now_utc_iso()),
        )
        return portfolio_id


class SqliteHoldingStore:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def list_holdings(self, portfolio_id: str) -> list[Holding]:
        rows = self.conn.execute(
            "SELECT symbol, quantity FROM holdings WHERE portfolio_id=? ORDER BY symbol",
            (portfolio_id,),
        ).fetchall()
        return [Holding(symbol=row[0], quantity=float(row[1] or 0.0)) for row in rows]

    def add(self, portfolio_id: str, symbol: str, quantity: float, average_cost: float = 0.0) -> str:
        holding_id = str(uuid.uuid4())
        self.conn.execute(
            "INSERT INTO holdings(id, portfolio_id, symbol, quantity, average_cost, updated_at_utc) VALUES(?,?,?,?,?,?)",
            (holding_id, portfolio_id, symbol.strip().upper(), float(quantity), float(average_cost), now_utc_iso()),
        )
        return holding_id


class SqliteCashStore:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def list_cash_accounts(self, portfolio_id: str) -> list[CashAccount]:
        rows = self.conn.execute(
            "SELECT balance FROM cash_accounts WHERE portfolio_id=?",
            (portfolio_id,),
        ).fetchall()
        return [CashAccount(balance=float(row[0] or 0.0)) for row in rows]

    def add(self, portfolio_id: str, account_name: str, balance: float, currency: str = "GBP") -> str:
        account_id = str(uuid.uuid4())
        self.conn.execute(
            "INSERT INTO cash_accounts(id, portfolio_id, account_name, balance, currency, updated_at_utc) VALUES(?,?,?,?,?,?)",
            (account_id, portfolio_id, account_name, float(balance), currency, now_utc_iso()),
        )
        return account_id
