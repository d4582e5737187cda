"""Concurrent price fan-out.

Fetches the current price of every distinct ticker in a set of holdings on a
bounded thread pool, waits for all of them, and returns the ticker -> price
index. Worker threads only return values; the index is assembled by the
calling thread after each future completes, so no shared state is mutated
concurrently.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from decimal import Decimal
from typing import Callable, Dict, List, Sequence, Tuple

from common.errors import PortfolioReturnError, PriceFetchError
from portfolio.holding import Holding
from portfolio.portfolio import Portfolio

logger = logging.getLogger(__name__)

PriceFetcher = Callable[[str], Decimal]

DEFAULT_MAX_WORKERS = 8


def fetch_prices(
    holdings: Sequence[Holding],
    fetch: PriceFetcher,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> Dict[str, Decimal]:
    """Fetch one price per distinct ticker and return them keyed by ticker.

    Every submitted fetch has finished by the time this returns or raises.
    On the first failure, fetches that have not started yet are cancelled.

    Raises
    ------
    PriceFetchError
        If any fetch failed; lists all failures in holdings order.
    """
    if max_workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {max_workers}")

    tickers = Portfolio(list(holdings)).tickers()
    if not tickers:
        return {}

    logger.info(
        "Fetching prices for %d tickers (%d holdings) with %d workers",
        len(tickers),
        len(holdings),
        min(max_workers, len(tickers)),
    )
    started = time.monotonic()

    results: Dict[str, Decimal] = {}
    failures: Dict[str, PortfolioReturnError] = {}

    with ThreadPoolExecutor(max_workers=min(max_workers, len(tickers))) as executor:
        future_to_ticker: Dict[Future, str] = {executor.submit(fetch, t): t for t in tickers}
        for future in as_completed(future_to_ticker):
            ticker = future_to_ticker[future]
            if future.cancelled():
                continue
            try:
                results[ticker] = future.result()
            except PortfolioReturnError as e:
                logger.debug("Price fetch for %s failed: %s", ticker, e)
                if not failures:
                    _cancel_pending(future_to_ticker)
                failures[ticker] = e
            else:
                logger.debug("Fetched %s: %s", ticker, results[ticker])

    if failures:
        ordered: List[Tuple[str, PortfolioReturnError]] = [(t, failures[t]) for t in tickers if t in failures]
        raise PriceFetchError(ordered)

    logger.info("Fetched %d prices in %.2fs", len(results), time.monotonic() - started)
    return results


def _cancel_pending(future_to_ticker: Dict[Future, str]) -> None:
    cancelled = [t for f, t in future_to_ticker.items() if f.cancel()]
    if cancelled:
        logger.debug("Cancelled %d pending fetches: %s", len(cancelled), ", ".join(cancelled))
