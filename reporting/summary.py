from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Sequence
import logging

from portfolio.holding import Holding
from portfolio.portfolio import Portfolio

logger = logging.getLogger(__name__)

ZERO = Decimal(0)

@dataclass(frozen=True)
class HoldingReturn:
    ticker: str
    num_shares: int
    avg_price_per_share: Decimal
    current_price: Decimal
    current_value: Decimal
    return_amount: Decimal

@dataclass(frozen=True)
class ReturnTotals:
    shares: int
    cost: Decimal
    value: Decimal
    return_amount: Decimal

@dataclass(frozen=True)
class ReturnReport:
    rows: List[HoldingReturn]
    totals: ReturnTotals

def holding_return(holding: Holding, price: Decimal) -> HoldingReturn:
    return HoldingReturn(
        ticker=holding.ticker,
        num_shares=holding.num_shares,
        avg_price_per_share=holding.avg_price_per_share,
        current_price=price,
        current_value=holding.num_shares * price,
        return_amount=holding.num_shares * (price - holding.avg_price_per_share),
    )

def summarize(holdings: Sequence[Holding], prices: Dict[str, Decimal]) -> ReturnReport:
    """Per-holding and aggregate returns, rows in holdings order.

    A ticker without a price is valued at zero.
    """
    rows: List[HoldingReturn] = []
    for h in holdings:
        price = prices.get(h.ticker)
        if price is None:
            logger.warning("No price for %s, valuing it at 0", h.ticker)
            price = ZERO
        rows.append(holding_return(h, price))

    portfolio = Portfolio(list(holdings))
    cost = portfolio.total_cost()
    value = sum((r.current_value for r in rows), ZERO)
    return ReturnReport(
        rows=rows,
        totals=ReturnTotals(
            shares=portfolio.total_shares(),
            cost=cost,
            value=value,
            return_amount=value - cost,
        ),
    )
