from __future__ import annotations

import structlog

from ..config import settings
from ..pipeline.errors import PriceDataUnavailable
from ..pipeline.ports import HistoryPoint
from .common import frame_to_history
from .yahoo_chart_adapter import YahooChartAdapter
from .yfinance_adapter import YFinanceAdapter

log = structlog.get_logger()


class ProviderChain:
    """Price history from the first provider that returns usable rows.

    Adapters return None on any failure; the chain raises
    ``PriceDataUnavailable`` only when every provider came back empty.
    """

    def __init__(self, providers: list | None = None):
        if providers is None:
            providers = [
                YFinanceAdapter(enabled=bool(settings.yf_enable)),
                YahooChartAdapter(enabled=bool(settings.yahoo_chart_enable)),
            ]
        self.providers = [p for p in providers if p is not None and getattr(p, "enabled", True)]

    def get_history(self, symbol: str, range_keyword: str, deadline: float | None = None) -> list[HistoryPoint]:
        tried = []
        for provider in self.providers:
            name = getattr(provider, "name", type(provider).__name__)
            tried.append(name)
            df = provider.history(symbol, range_keyword, deadline=deadline)
            points = frame_to_history(df)
            if points:
                log.debug("price_history_loaded", symbol=symbol, provider=name, range=range_keyword, rows=len(points))
                return points
        raise PriceDataUnavailable(symbol, "no_provider_data" if tried else "no_providers")

    def close(self):
        for provider in self.providers:
            closer = getattr(provider, "close", None)
            if callable(closer):
                closer()
