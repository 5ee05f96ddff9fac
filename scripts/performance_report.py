#!/usr/bin/env python3
"""
Print the dashboard performance payload for a user without running the API.

Usage:
    python scripts/performance_report.py --user-id demo --period monthly
    python scripts/performance_report.py --user-id demo --start 2024-01-01 --end 2024-06-30
"""
from pathlib import Path
import argparse
import json
import os
import sys

# Ensure repo root is on sys.path and is the working directory.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
os.chdir(ROOT)

from networth.config import settings
from networth.db import get_conn, migrate
from networth.logging import setup_logging
from networth.pipeline.errors import PerformanceError
from networth.pipeline.orchestrator import PerformanceService
from networth.providers.chain import ProviderChain
from networth.stores import SqliteCashStore, SqliteHoldingStore, SqlitePortfolioStore

def main() -> int:
    parser = argparse.ArgumentParser(description="Portfolio performance report")
    parser.add_argument("--user-id", required=True)
    parser.add_argument("--period", default="daily", help="daily|weekly|monthly|yearly")
    parser.add_argument("--portfolio-id")
    parser.add_argument("--start", help="YYYY-MM-DD")
    parser.add_argument("--end", help="YYYY-MM-DD")
    args = parser.parse_args()

    setup_logging(os.getenv("LOG_LEVEL", "WARNING"))
    conn = get_conn(settings.db_path)
    migrate(conn)
    provider = ProviderChain()
    service = PerformanceService(
        SqlitePortfolioStore(conn),
        SqliteHoldingStore(conn),
        SqliteCashStore(conn),
        provider,
    )
    try:
        result = service.performance(
            args.user_id,
            period=args.period,
            portfolio_id=args.portfolio_id,
            start_date=args.start,
            end_date=args.end,
        )
    except PerformanceError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    finally:
        provider.close()
        conn.close()
    print(json.dumps(result.to_dict(), indent=2))
    return 0

if __name__ == '__main__':
    sys.exit(main())
