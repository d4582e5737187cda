"""Daily price bar as returned by the Tiingo end-of-day endpoint."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

import pandas as pd

from common.errors import ResponseParseError

# Tiingo JSON name -> DailyPrice attribute, for the optional numeric fields.
OPTIONAL_FIELDS = {
    "open": "open",
    "high": "high",
    "low": "low",
    "volume": "volume",
    "adjOpen": "adj_open",
    "adjHigh": "adj_high",
    "adjLow": "adj_low",
    "adjClose": "adj_close",
    "adjVolume": "adj_volume",
    "divCash": "div_cash",
    "splitFactor": "split_factor",
}


def _number(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    return None


@dataclass(frozen=True)
class DailyPrice:
    """One trading day for one ticker. Only ``close`` feeds the return report."""

    date: pd.Timestamp
    close: Decimal
    open: Optional[Decimal] = None
    high: Optional[Decimal] = None
    low: Optional[Decimal] = None
    volume: Optional[Decimal] = None
    adj_open: Optional[Decimal] = None
    adj_high: Optional[Decimal] = None
    adj_low: Optional[Decimal] = None
    adj_close: Optional[Decimal] = None
    adj_volume: Optional[Decimal] = None
    div_cash: Optional[Decimal] = None
    split_factor: Optional[Decimal] = None

    @classmethod
    def from_json(cls, record: Dict[str, Any], ticker: str = "") -> "DailyPrice":
        """Build a DailyPrice from one element of the API response array."""
        label = f" for {ticker}" if ticker else ""
        if not isinstance(record, dict):
            raise ResponseParseError(f"price record{label} must be an object, got {type(record).__name__}")

        close = _number(record.get("close"))
        if close is None:
            raise ResponseParseError(f"price record{label} has no numeric 'close': {record.get('close')!r}")

        raw_date = record.get("date")
        if not isinstance(raw_date, str):
            raise ResponseParseError(f"price record{label} has no 'date'")
        try:
            date = pd.Timestamp(raw_date)
        except ValueError as exc:
            raise ResponseParseError(f"price record{label} has an invalid date {raw_date!r}") from exc
        if pd.isna(date):
            raise ResponseParseError(f"price record{label} has an empty date")

        extras = {attr: _number(record.get(key)) for key, attr in OPTIONAL_FIELDS.items()}
        return cls(date=date, close=close, **extras)
