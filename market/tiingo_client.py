"""Tiingo end-of-day price client.

Read-only client for ``/tiingo/daily/{ticker}/prices``. Without a date range
the endpoint returns the most recent trading day first; only that element is
used.
"""
from __future__ import annotations

import json
import logging
from decimal import Decimal
from urllib.parse import quote
from typing import Any, List, Optional

import requests

from common.errors import NetworkError, NoPriceDataError, ResponseParseError
from market.daily_price import DailyPrice

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.tiingo.com/tiingo/daily"
DEFAULT_TIMEOUT = 10.0


class TiingoClient:
    """Fetches latest daily prices from Tiingo.

    Parameters
    ----------
    api_key:
        Tiingo API token, sent as the ``token`` query parameter.
    base_url:
        Endpoint root; ``/{ticker}/prices`` is appended.
    timeout:
        Seconds to wait for connect and read before giving up.
    session:
        Optional ``requests.Session`` for connection reuse/testing. A session
        passed in is left open by ``close()``; one created here is closed.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or requests.Session()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "TiingoClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def prices_url(self, ticker: str) -> str:
        return f"{self.base_url}/{quote(ticker, safe='')}/prices"

    def fetch_daily(self, ticker: str) -> List[Any]:
        """Return the decoded JSON array for ``ticker``.

        Raises
        ------
        NetworkError
            Connection failure, timeout, or a non-2xx status.
        ResponseParseError
            Body is not a JSON array.
        """
        url = self.prices_url(ticker)
        logger.debug("Requesting %s", url)
        try:
            response = self.session.get(url, params={"token": self.api_key}, timeout=self.timeout)
        except requests.Timeout as exc:
            raise NetworkError(f"request for {ticker} timed out after {self.timeout:g}s") from exc
        except requests.RequestException as exc:
            raise NetworkError(f"There was an error contacting the API for {ticker}: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise NetworkError(
                f"API returned HTTP {response.status_code} for {ticker}: {_error_detail(response)}",
                status_code=response.status_code,
            )

        try:
            payload = json.loads(response.text, parse_float=Decimal)
        except ValueError as exc:
            raise ResponseParseError(f"There was an error parsing the API response for {ticker}: {exc}") from exc

        if not isinstance(payload, list):
            raise ResponseParseError(
                f"API response for {ticker} must be a JSON array, got {type(payload).__name__}"
            )
        return payload

    def fetch_latest(self, ticker: str) -> DailyPrice:
        """Return the most recent daily price for ``ticker``."""
        payload = self.fetch_daily(ticker)
        if not payload:
            raise NoPriceDataError(f"no price data available for {ticker}")
        return DailyPrice.from_json(payload[0], ticker=ticker)

    def fetch_latest_close(self, ticker: str) -> Decimal:
        latest = self.fetch_latest(ticker)
        logger.debug("%s closed at %s on %s", ticker, latest.close, latest.date.date())
        return latest.close


def _error_detail(response: requests.Response) -> str:
    """Best-effort error text: Tiingo's ``detail`` field, else the raw body."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    text = (response.text or "").strip()
    return text[:200] if text else "Unknown error"
