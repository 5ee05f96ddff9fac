from typing import Optional
import pandas as pd
from ..config import settings
from ..utils import retry_call
from .common import interval_for, normalize_prices


class YFinanceAdapter:
    name = "yfinance"

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        try:
            if enabled:
                import yfinance as yf  # type: ignore
                self.yf = yf
            else:
                self.yf = None
        except Exception:
            self.enabled = False
            self.yf = None

    def _fetch(self, symbol: str, range_keyword: str):
        t = self.yf.Ticker(symbol)
        return t.history(period=range_keyword, interval=interval_for(range_keyword), auto_adjust=False)

    def history(self, symbol: str, range_keyword: str, deadline: float | None = None) -> Optional[pd.DataFrame]:
        if not self.enabled or self.yf is None:
            return None
        try:
            df = retry_call(
                lambda: self._fetch(symbol, range_keyword),
                attempts=settings.http_retry_attempts,
                base_delay=settings.http_retry_backoff_seconds,
                deadline=deadline,
            )
        except Exception:
            return None
        if not isinstance(df, pd.DataFrame):
            return None
        if isinstance(df.columns, pd.MultiIndex):
            df.columns = [col[0] for col in df.columns]
        return normalize_prices(df.reset_index(), symbol)
