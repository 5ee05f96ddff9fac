#!/usr/bin/env python3
"""
Seed a demo user with two portfolios (one with holdings, one cash-only).

Usage:
    python scripts/seed_demo.py [--user-id demo]
"""
from pathlib import Path
import argparse
import os
import sys

# Ensure repo root is on sys.path and is the working directory.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
os.chdir(ROOT)

from networth.db import get_conn, migrate
from networth.config import settings
from networth.stores import SqliteCashStore, SqliteHoldingStore, SqlitePortfolioStore

def seed(user_id: str):
    conn = get_conn(settings.db_path)
    migrate(conn)
    portfolios = SqlitePortfolioStore(conn)
    holdings = SqliteHoldingStore(conn)
    cash = SqliteCashStore(conn)

    isa = portfolios.create(user_id, "Stocks ISA", type="ISA")
    holdings.add(isa, "VWRL.L", 120)
    holdings.add(isa, "AAPL", 15)
    holdings.add(isa, "AAPL", 5)
    cash.add(isa, "ISA cash", 250.0)

    savings = portfolios.create(user_id, "Easy access savings", type="SAVINGS")
    cash.add(savings, "Instant saver", 5000.0)
    return isa, savings

if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Seed demo portfolios")
    parser.add_argument("--user-id", default="demo")
    args = parser.parse_args()
    isa, savings = seed(args.user_id)
    print('Seeded', args.user_id, '| portfolios:', isa, savings)
