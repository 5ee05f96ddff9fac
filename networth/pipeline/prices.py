from __future__ import annotations

import math
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Iterable

import structlog

from .errors import PriceDataUnavailable, RequestCancelled
from .periods import Granularity, bucket_key
from .ports import HistoryPoint, PriceHistoryProvider

log = structlog.get_logger()

_POLL_SECONDS = 0.05


def _usable_close(close) -> bool:
    if close is None:
        return False
    try:
        val = float(close)
    except (TypeError, ValueError):
        return False
    return math.isfinite(val) and val > 0


def bucket_history(points: Iterable[HistoryPoint], granularity: Granularity) -> dict[str, float]:
    """Collapse raw history into ``bucketKey -> close``.

    Points are ordered by timestamp first; within a bucket the latest
    observation wins. Non-positive and missing closes never enter the map.
    """
    out: dict[str, float] = {}
    for point in sorted(points, key=lambda p: p.timestamp):
        if not _usable_close(point.close):
            continue
        out[bucket_key(point.timestamp, granularity)] = float(point.close)
    return out


def _fetch_one(provider: PriceHistoryProvider, symbol: str, range_keyword: str, started: dict, deadline: float | None):
    started[symbol] = time.monotonic()
    return provider.get_history(symbol, range_keyword, deadline=deadline)


def build_price_series(
    symbols: Iterable[str],
    range_keyword: str,
    granularity: Granularity,
    provider: PriceHistoryProvider,
    *,
    workers: int = 4,
    symbol_timeout: float | None = None,
    deadline: float | None = None,
) -> tuple[dict[str, dict[str, float]], dict[str, str]]:
    """Fetch and bucket price history for every symbol.

    Returns ``(price_maps, skipped)`` where ``skipped`` maps each symbol that
    contributed nothing to the reason. Per-symbol failures never escape;
    only the request deadline does, as ``RequestCancelled``.
    """
    symbols = sorted({s for s in symbols if s})
    price_maps: dict[str, dict[str, float]] = {}
    skipped: dict[str, str] = {}
    if not symbols:
        return price_maps, skipped

    started: dict[str, float] = {}
    executor = ThreadPoolExecutor(max_workers=max(1, int(workers)), thread_name_prefix="price-fetch")
    try:
        pending: dict[Future, str] = {
            executor.submit(_fetch_one, provider, sym, range_keyword, started, deadline): sym
            for sym in symbols
        }
        while pending:
            if deadline is not None and time.monotonic() >= deadline:
                log.warning("price_fetch_cancelled", pending=sorted(pending.values()))
                raise RequestCancelled("time_budget_exceeded_price_fetch")
            done, _ = wait(list(pending), timeout=_POLL_SECONDS, return_when=FIRST_COMPLETED)
            for fut in done:
                sym = pending.pop(fut)
                reason = _collect(fut, sym, granularity, price_maps)
                if reason:
                    skipped[sym] = reason
            if symbol_timeout is None:
                continue
            now = time.monotonic()
            for fut, sym in list(pending.items()):
                began = started.get(sym)
                if began is not None and now - began > symbol_timeout:
                    # The worker keeps running; its result is ignored.
                    pending.pop(fut)
                    skipped[sym] = "timeout"
                    log.warning("price_history_timeout", symbol=sym, timeout_seconds=symbol_timeout)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    log.debug(
        "price_series_built",
        range=range_keyword,
        granularity=granularity.value,
        symbols_count=len(symbols),
        priced_count=len(price_maps),
        skipped=skipped,
    )
    return price_maps, skipped


def _collect(fut: Future, symbol: str, granularity: Granularity, price_maps: dict) -> str | None:
    exc = fut.exception()
    if isinstance(exc, PriceDataUnavailable):
        log.warning("price_history_unavailable", symbol=symbol, reason=exc.reason)
        return exc.reason
    if exc is not None:
        log.warning("price_history_failed", symbol=symbol, err=str(exc))
        return "error"
    series = bucket_history(fut.result() or [], granularity)
    if not series:
        log.warning("price_history_empty", symbol=symbol)
        return "empty"
    price_maps[symbol] = series
    return None
