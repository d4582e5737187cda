"""Tests for concurrent price fetching.

Covers:
- One fetch per distinct ticker
- Full join before returning
- Failure aggregation without partial results
"""
from __future__ import annotations

import threading
import time
from decimal import Decimal

import pytest

from common.errors import NetworkError, NoPriceDataError, PriceFetchError
from engine.price_engine import fetch_prices
from portfolio.holding import Holding


def make_holdings(*tickers: str) -> list[Holding]:
    """Helper to create one-share holdings for the given tickers."""
    return [Holding(t, 1, Decimal("1")) for t in tickers]


class RecordingFetcher:
    """Fake price source that records calls and can fail per ticker."""

    def __init__(self, prices: dict, errors: dict | None = None, delay: float = 0.0):
        self.prices = prices
        self.errors = errors or {}
        self.delay = delay
        self.calls: list[str] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def __call__(self, ticker: str) -> Decimal:
        with self._lock:
            self.calls.append(ticker)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            if ticker in self.errors:
                raise self.errors[ticker]
            return self.prices[ticker]
        finally:
            with self._lock:
                self.active -= 1


class TestFetchPrices:
    """Tests for successful fan-out."""

    def test_returns_price_per_ticker(self):
        fetch = RecordingFetcher({"AAPL": Decimal("110"), "MSFT": Decimal("190")})

        prices = fetch_prices(make_holdings("AAPL", "MSFT"), fetch)

        assert prices == {"AAPL": Decimal("110"), "MSFT": Decimal("190")}

    def test_duplicate_tickers_fetched_once(self):
        """Holdings sharing a ticker trigger a single fetch."""
        fetch = RecordingFetcher({"AAPL": Decimal("110"), "MSFT": Decimal("190")})

        prices = fetch_prices(make_holdings("AAPL", "MSFT", "AAPL", "AAPL"), fetch)

        assert sorted(fetch.calls) == ["AAPL", "MSFT"]
        assert prices["AAPL"] == Decimal("110")

    def test_empty_holdings_makes_no_calls(self):
        fetch = RecordingFetcher({})

        assert fetch_prices([], fetch) == {}
        assert fetch.calls == []

    def test_worker_bound_respected(self):
        """No more than max_workers fetches run at once."""
        tickers = [f"T{i}" for i in range(8)]
        fetch = RecordingFetcher({t: Decimal(i) for i, t in enumerate(tickers)}, delay=0.05)

        prices = fetch_prices(make_holdings(*tickers), fetch, max_workers=2)

        assert len(prices) == 8
        assert fetch.max_active <= 2

    def test_fetches_run_concurrently(self):
        tickers = ["A", "B", "C", "D"]
        fetch = RecordingFetcher({t: Decimal(1) for t in tickers}, delay=0.2)

        fetch_prices(make_holdings(*tickers), fetch, max_workers=4)

        assert fetch.max_active > 1

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            fetch_prices(make_holdings("A"), RecordingFetcher({"A": Decimal(1)}), max_workers=0)


class TestFetchPricesErrors:
    """Tests for failure propagation to the caller."""

    def test_single_failure_raises_with_kind(self):
        fetch = RecordingFetcher(
            {"AAPL": Decimal("110")},
            errors={"ZZZZ": NoPriceDataError("no price data available for ZZZZ")},
        )

        with pytest.raises(PriceFetchError) as exc:
            fetch_prices(make_holdings("AAPL", "ZZZZ"), fetch)

        assert exc.value.kind == "data"
        assert list(exc.value.by_ticker()) == ["ZZZZ"]
        assert "ZZZZ" in str(exc.value)

    def test_all_failures_reported_in_holdings_order(self):
        """Both fetches are already running, so both failures are collected."""
        fetch = RecordingFetcher(
            {},
            errors={
                "B": NetworkError("down"),
                "A": NoPriceDataError("empty"),
            },
            delay=0.1,
        )

        with pytest.raises(PriceFetchError) as exc:
            fetch_prices(make_holdings("A", "B"), fetch, max_workers=2)

        assert [t for t, _ in exc.value.failures] == ["A", "B"]
        assert exc.value.kind == "data"

    def test_pending_fetches_cancelled_after_failure(self):
        """Queued fetches do not start once a failure has been seen."""
        tickers = ["BAD"] + [f"T{i}" for i in range(20)]
        fetch = RecordingFetcher(
            {t: Decimal(1) for t in tickers[1:]},
            errors={"BAD": NetworkError("down")},
            delay=0.01,
        )

        with pytest.raises(PriceFetchError):
            fetch_prices(make_holdings(*tickers), fetch, max_workers=1)

        assert len(fetch.calls) < len(tickers)

    def test_unexpected_exception_propagates(self):
        """Programming errors are not folded into PriceFetchError."""
        fetch = RecordingFetcher({}, errors={"A": RuntimeError("bug")})

        with pytest.raises(RuntimeError):
            fetch_prices(make_holdings("A"), fetch)
