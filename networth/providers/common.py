import pandas as pd

from ..pipeline.ports import HistoryPoint

CANON_COLS = ["date", "open", "high", "low", "close", "adj_close", "volume", "symbol"]

# Interval requested from Yahoo for each coarse range keyword.
RANGE_INTERVALS = {
    "1mo": "1h",
    "6mo": "1d",
    "1y": "1d",
    "2y": "1d",
    "5y": "1wk",
    "10y": "1d",
}

def interval_for(range_keyword: str) -> str:
    return RANGE_INTERVALS.get(range_keyword, "1d")

def normalize_prices(df, symbol: str):
    if df is None or not isinstance(df, pd.DataFrame) or df.empty:
        return None
    d = df.copy()
    if "date" not in d.columns:
        if isinstance(d.index, pd.DatetimeIndex):
            d = d.reset_index().rename(columns={"index": "date"})
    rename = {
        "Date": "date",
        "Datetime": "date",
        "Open": "open",
        "High": "high",
        "Low": "low",
        "Close": "close",
        "Adj Close": "adj_close",
        "Volume": "volume",
        "Symbol": "symbol",
    }
    d = d.rename(columns=rename)
    if "date" not in d.columns or "close" not in d.columns:
        return None
    if "adj_close" not in d.columns:
        d["adj_close"] = d["close"]
    if "symbol" not in d.columns:
        d["symbol"] = symbol
    keep = [c for c in CANON_COLS if c in d.columns]
    d = d[keep]
    # Keep full timestamps; the exchange timezone decides which calendar day a bar belongs to.
    d["date"] = pd.to_datetime(d["date"])
    for c in ["open", "high", "low", "close", "adj_close"]:
        if c in d.columns:
            d[c] = pd.to_numeric(d[c], errors="coerce")
    if "volume" in d.columns:
        d["volume"] = pd.to_numeric(d["volume"], errors="coerce").fillna(0).astype("int64")
    return d.sort_values("date", kind="stable").reset_index(drop=True)

def frame_to_history(df) -> list[HistoryPoint]:
    if df is None or getattr(df, "empty", True):
        return []
    out = []
    for ts, close in zip(df["date"], df["close"]):
        if pd.isna(ts):
            continue
        out.append(HistoryPoint(timestamp=pd.Timestamp(ts).to_pydatetime(), close=None if pd.isna(close) else float(close)))
    return out
