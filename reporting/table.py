"""Fixed-width return table.

    -----------------------------------------------------------
    | Ticker | Shares | Avg Cost | Current Value |   Return   |
    -----------------------------------------------------------
    |  AAPL  |  10    | 100.00   |    1100.00    |  100.00    |
    -----------------------------------------------------------
    | TOTALS |  10    | 1000.00  |    1100.00    |  100.00    |
    -----------------------------------------------------------

The TOTALS row carries total cost in the Avg Cost column.
"""
from __future__ import annotations

import sys
from decimal import ROUND_HALF_UP, Decimal, DecimalException
from typing import Dict, List, Sequence, TextIO

from common.errors import ReportError
from portfolio.holding import Holding
from reporting.summary import ReturnReport, summarize

SEPARATOR = "-" * 59
HEADER = "| Ticker | Shares | Avg Cost | Current Value |   Return   |"

CENT = Decimal("0.01")


def money(value: Decimal) -> str:
    """Two decimals, half-up, never ``-0.00``."""
    q = value.quantize(CENT, rounding=ROUND_HALF_UP)
    if q.is_zero():
        q = q.copy_abs()
    return f"{q:f}"


def format_row(label: str, shares: int, cost: Decimal, value: Decimal, ret: Decimal) -> str:
    return f"|  {label:<6}|  {shares:<6d}| {money(cost):<9}|    {money(value):<11}|  {money(ret):<10}|"


def render_report(report: ReturnReport) -> List[str]:
    lines = [SEPARATOR, HEADER, SEPARATOR]
    for r in report.rows:
        lines.append(format_row(r.ticker, r.num_shares, r.avg_price_per_share, r.current_value, r.return_amount))
        lines.append(SEPARATOR)

    t = report.totals
    lines.append(
        f"| TOTALS |  {t.shares:<6d}| {money(t.cost):<9}|    {money(t.value):<11}|  {money(t.return_amount):<10}|"
    )
    lines.append(SEPARATOR)
    return lines


def report_lines(holdings: Sequence[Holding], prices: Dict[str, Decimal]) -> List[str]:
    """Summarize and render; arithmetic failures become ReportError."""
    try:
        return render_report(summarize(holdings, prices))
    except DecimalException as exc:
        raise ReportError(f"amounts are too large to report to the cent: {exc!r}") from exc


def write_report(lines: Sequence[str], out: TextIO | None = None) -> None:
    out = out or sys.stdout
    for line in lines:
        out.write(line + "\n")


def print_report(holdings: Sequence[Holding], prices: Dict[str, Decimal], out: TextIO | None = None) -> None:
    write_report(report_lines(holdings, prices), out)
