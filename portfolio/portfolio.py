from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List
from portfolio.holding import Holding

@dataclass(frozen=True)
class Portfolio:
    holdings: List[Holding] = field(default_factory=list)

    def tickers(self) -> List[str]:
        """Distinct tickers in first-seen order."""
        return list(dict.fromkeys(h.ticker for h in self.holdings))

    def total_shares(self) -> int:
        return sum(h.num_shares for h in self.holdings)

    def total_cost(self) -> Decimal:
        return sum((h.cost_basis() for h in self.holdings), Decimal(0))
