"""Holdings file loader.

The holdings file is a JSON array of objects::

    [
      {"Ticker": "AAPL", "NumShares": 10, "AvgPricePerShare": 100.00},
      ...
    ]

Field names are matched case-insensitively and unknown fields are ignored.
Prices are parsed straight into ``Decimal``.
"""
from __future__ import annotations

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List

from common.errors import HoldingsParseError, InputFileError
from portfolio.holding import Holding

logger = logging.getLogger(__name__)

FIELD_TICKER = "Ticker"
FIELD_SHARES = "NumShares"
FIELD_AVG_PRICE = "AvgPricePerShare"


def _field(obj: Dict[str, Any], name: str, index: int) -> Any:
    """Look up ``name`` in ``obj``, preferring an exact key match."""
    if name in obj:
        return obj[name]
    for key, value in obj.items():
        if key.lower() == name.lower():
            return value
    raise HoldingsParseError(f"holding #{index} is missing field '{name}'")


def parse_holding(obj: Any, index: int) -> Holding:
    """Convert one decoded JSON element into a Holding."""
    if not isinstance(obj, dict):
        raise HoldingsParseError(f"holding #{index} must be an object, got {type(obj).__name__}")

    ticker = _field(obj, FIELD_TICKER, index)
    if not isinstance(ticker, str) or not ticker.strip():
        raise HoldingsParseError(f"holding #{index}: {FIELD_TICKER} must be a non-empty string")

    shares = _field(obj, FIELD_SHARES, index)
    # bool is an int subclass
    if isinstance(shares, bool) or not isinstance(shares, int):
        raise HoldingsParseError(f"holding #{index}: {FIELD_SHARES} must be an integer, got {shares!r}")

    avg_price = _field(obj, FIELD_AVG_PRICE, index)
    if isinstance(avg_price, bool) or not isinstance(avg_price, (int, Decimal)):
        raise HoldingsParseError(f"holding #{index}: {FIELD_AVG_PRICE} must be a number, got {avg_price!r}")

    return Holding(
        ticker=ticker.strip(),
        num_shares=shares,
        avg_price_per_share=Decimal(avg_price),
    )


def parse_holdings(text: str) -> List[Holding]:
    """Parse the holdings document; all or nothing."""
    try:
        data = json.loads(text, parse_float=Decimal)
    except ValueError as exc:
        raise HoldingsParseError(f"There was an error while parsing holdings file: {exc}") from exc

    if not isinstance(data, list):
        raise HoldingsParseError(
            f"There was an error while parsing holdings file: expected a JSON array, got {type(data).__name__}"
        )
    return [parse_holding(obj, i) for i, obj in enumerate(data)]


def load_holdings(path: str | Path) -> List[Holding]:
    """Read ``path`` and return its holdings in file order."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise InputFileError(f"There was an error opening '{p}': {exc.strerror or exc}") from exc
    except UnicodeDecodeError as exc:
        raise HoldingsParseError(f"There was an error while parsing holdings file: {exc}") from exc

    holdings = parse_holdings(text)
    logger.info("Loaded %d holdings from %s", len(holdings), p)
    return holdings
