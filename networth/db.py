import sqlite3
from pathlib import Path

def get_conn(db_path: str) -> sqlite3.Connection:
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    # Requests run in FastAPI's threadpool; each opens its own connection.
    conn = sqlite3.connect(db_path, isolation_level=None, check_same_thread=False)  # autocommit
    conn.execute("PRAGMA foreign_keys=ON;")
    if db_path != ":memory:":
        conn.execute("PRAGMA journal_mode=WAL;")
    return conn

DDL = [
    """
CREATE TABLE IF NOT EXISTS portfolios (
  id TEXT PRIMARY KEY,
  user_id TEXT NOT NULL,
  name TEXT NOT NULL,
  type TEXT NOT NULL DEFAULT 'GIA',  -- 'GIA'|'ISA'|'SIPP'|'CRYPTO'|'SAVINGS'|'CASH'|...
  currency TEXT NOT NULL DEFAULT 'GBP',
  is_active INTEGER NOT NULL DEFAULT 1,
  created_at_utc TEXT NOT NULL
);
""",
    "CREATE INDEX IF NOT EXISTS ix_portfolios_user ON portfolios(user_id, is_active);",

    # Current positions only; quantities are not versioned over time.
    """
CREATE TABLE IF NOT EXISTS holdings (
  id TEXT PRIMARY KEY,
  portfolio_id TEXT NOT NULL REFERENCES portfolios(id) ON DELETE CASCADE,
  symbol TEXT NOT NULL,
  quantity REAL NOT NULL,
  average_cost REAL NOT NULL DEFAULT 0,
  updated_at_utc TEXT NOT NULL
);
""",
    "CREATE INDEX IF NOT EXISTS ix_holdings_portfolio ON holdings(portfolio_id);",

    """
CREATE TABLE IF NOT EXISTS cash_accounts (
  id TEXT PRIMARY KEY,
  portfolio_id TEXT NOT NULL REFERENCES portfolios(id) ON DELETE CASCADE,
  account_name TEXT NOT NULL,
  balance REAL NOT NULL DEFAULT 0,
  currency TEXT NOT NULL DEFAULT 'GBP',
  updated_at_utc TEXT NOT NULL
);
""",
    "CREATE INDEX IF NOT EXISTS ix_cash_accounts_portfolio ON cash_accounts(portfolio_id);",
]

def migrate(conn: sqlite3.Connection):
    cur = conn.cursor()
    for stmt in DDL:
        cur.execute(stmt)
    cols = {row[1] for row in cur.execute("PRAGMA table_info(portfolios)").fetchall()}
    if cols and "currency" not in cols:
        cur.execute("ALTER TABLE portfolios ADD COLUMN currency TEXT NOT NULL DEFAULT 'GBP'")
    conn.commit()
