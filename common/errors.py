"""Error types for the portfolio return pipeline.

Every failure the CLI reports maps to one of these classes. ``kind`` is the
short label used in the one-line diagnostic (``"network error: ..."``).
"""
from __future__ import annotations

from typing import Dict, List, Tuple


class PortfolioReturnError(Exception):
    """Base class for all reportable failures."""

    kind = "error"

    def describe(self) -> str:
        return f"{self.kind} error: {self}"


class InputFileError(PortfolioReturnError):
    """A local input file could not be opened or read."""

    kind = "io"


class SettingsError(PortfolioReturnError):
    """The settings file holds a value of the wrong type or range."""

    kind = "config"


class HoldingsParseError(PortfolioReturnError):
    """The holdings file is not a JSON array of holding objects."""

    kind = "parse"


class ResponseParseError(PortfolioReturnError):
    """The price API answered with a body we cannot interpret."""

    kind = "parse"


class NetworkError(PortfolioReturnError):
    """The price API request failed, timed out, or returned an error status."""

    kind = "network"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NoPriceDataError(PortfolioReturnError):
    """The price API returned an empty price list for a ticker."""

    kind = "data"


class PriceFetchError(PortfolioReturnError):
    """One or more concurrent price fetches failed.

    ``failures`` keeps (ticker, error) pairs in holdings order. The kind of
    the aggregate is the kind of the first failure.
    """

    def __init__(self, failures: List[Tuple[str, PortfolioReturnError]]) -> None:
        if not failures:
            raise ValueError("PriceFetchError needs at least one failure")
        self.failures = list(failures)
        first_ticker, first_error = self.failures[0]
        self.kind = first_error.kind
        msg = f"{first_ticker}: {first_error}"
        if len(self.failures) > 1:
            others = ", ".join(t for t, _ in self.failures[1:])
            msg += f" (also failed: {others})"
        super().__init__(msg)

    def by_ticker(self) -> Dict[str, PortfolioReturnError]:
        return dict(self.failures)


class ReportError(PortfolioReturnError):
    """An amount in the report cannot be computed or shown to the cent."""

    kind = "data"
