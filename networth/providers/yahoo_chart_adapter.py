from __future__ import annotations

from typing import Optional
from urllib.parse import quote

import httpx
import pandas as pd

from ..config import settings
from ..utils import retry_call
from .common import interval_for, normalize_prices


class YahooChartAdapter:
    name = "yahoo_chart"

    def __init__(self, client: httpx.Client | None = None, enabled: bool = True, base_url: str | None = None, timeout: float | None = None):
        self.enabled = enabled
        self.base_url = (base_url or settings.yahoo_chart_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        # httpx.Client is safe to share across the price fetch workers.
        self.client = client or httpx.Client(follow_redirects=True)
        self.headers = {
            "accept": "application/json, text/plain, */*",
            "user-agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Safari/537.36",
        }

    def _fetch_chart(self, symbol: str, range_keyword: str, deadline: float | None = None) -> dict:
        url = f"{self.base_url}/{quote(symbol, safe='')}"

        def _call():
            resp = self.client.get(
                url,
                headers=self.headers,
                params={"range": range_keyword, "interval": interval_for(range_keyword)},
                timeout=self.timeout,
            )
            if resp.status_code == 429:
                raise RuntimeError("yahoo_rate_limited")
            if resp.status_code != 200:
                raise RuntimeError(f"yahoo_status_{resp.status_code}")
            return resp.json()

        return retry_call(
            _call,
            attempts=settings.http_retry_attempts,
            base_delay=settings.http_retry_backoff_seconds,
            deadline=deadline,
        )

    def history(self, symbol: str, range_keyword: str, deadline: float | None = None) -> Optional[pd.DataFrame]:
        if not self.enabled:
            return None
        try:
            payload = self._fetch_chart(symbol, range_keyword, deadline=deadline)
        except Exception:
            return None
        return chart_to_frame(payload, symbol)

    def close(self):
        self.client.close()


def chart_to_frame(payload: dict, symbol: str) -> Optional[pd.DataFrame]:
    chart = (payload or {}).get("chart") or {}
    if chart.get("error"):
        return None
    results = chart.get("result") or []
    if not results:
        return None
    result = results[0] or {}
    stamps = result.get("timestamp") or []
    quotes = (result.get("indicators") or {}).get("quote") or []
    if not stamps or not quotes:
        return None
    closes = quotes[0].get("close") or []
    n = min(len(stamps), len(closes))
    if n == 0:
        return None
    tz_name = (result.get("meta") or {}).get("exchangeTimezoneName") or "UTC"
    dates = pd.to_datetime(stamps[:n], unit="s", utc=True)
    try:
        dates = dates.tz_convert(tz_name)
    except Exception:
        pass
    df = pd.DataFrame({"date": dates, "close": closes[:n]})
    return normalize_prices(df, symbol)
