import unittest

from networth.db import get_conn, migrate
from networth.stores import SqliteCashStore, SqliteHoldingStore, SqlitePortfolioStore

P1 = "11111111-1111-1111-1111-111111111111"


class SqliteStoreTests(unittest.TestCase):
    def setUp(self):
        self.conn = get_conn(":memory:")
        migrate(self.conn)
        self.portfolios = SqlitePortfolioStore(self.conn)
        self.holdings = SqliteHoldingStore(self.conn)
        self.cash = SqliteCashStore(self.conn)

    def tearDown(self):
        self.conn.close()

    def test_migrate_is_idempotent(self):
        migrate(self.conn)
        tables = {r[0] for r in self.conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        self.assertTrue({"portfolios", "holdings", "cash_accounts"} <= tables)

    def test_list_portfolios_scoped_to_user_and_active(self):
        self.portfolios.create("alice", "ISA", type="ISA", portfolio_id=P1)
        hidden = self.portfolios.create("alice", "Closed")
        self.conn.execute("UPDATE portfolios SET is_active=0 WHERE id=?", (hidden,))
        self.portfolios.create("bob", "Bob GIA")

        listed = self.portfolios.list_portfolios("alice")
        self.assertEqual([p.id for p in listed], [P1])
        self.assertEqual((listed[0].name, listed[0].type, listed[0].currency), ("ISA", "ISA", "GBP"))
        self.assertEqual(self.portfolios.list_portfolios("carol"), [])

    def test_belongs_to_user(self):
        self.portfolios.create("alice", "ISA", portfolio_id=P1)
        self.assertTrue(self.portfolios.belongs_to_user(P1, "alice"))
        self.assertFalse(self.portfolios.belongs_to_user(P1, "bob"))
        self.assertFalse(self.portfolios.belongs_to_user("missing", "alice"))

    def test_holdings_round_trip_uppercases_symbol(self):
        self.portfolios.create("alice", "ISA", portfolio_id=P1)
        self.holdings.add(P1, " vwrl.l ", 12.5)
        self.holdings.add(P1, "AAPL", 3)
        held = self.holdings.list_holdings(P1)
        self.assertEqual([(h.symbol, h.quantity) for h in held], [("AAPL", 3.0), ("VWRL.L", 12.5)])
        self.assertEqual(self.holdings.list_holdings("missing"), [])

    def test_cash_accounts(self):
        self.portfolios.create("alice", "Savings", portfolio_id=P1)
        self.cash.add(P1, "Easy access", 1000)
        self.cash.add(P1, "Notice", 250.5)
        self.assertEqual(sorted(a.balance for a in self.cash.list_cash_accounts(P1)), [250.5, 1000.0])

    def test_deleting_portfolio_cascades(self):
        self.portfolios.create("alice", "ISA", portfolio_id=P1)
        self.holdings.add(P1, "AAA", 1)
        self.cash.add(P1, "Cash", 10)
        self.conn.execute("DELETE FROM portfolios WHERE id=?", (P1,))
        self.assertEqual(self.holdings.list_holdings(P1), [])
        self.assertEqual(self.cash.list_cash_accounts(P1), [])


if __name__ == "__main__":
    unittest.main()
