from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal

@dataclass(frozen=True)
class Holding:
    ticker: str
    num_shares: int
    avg_price_per_share: Decimal

    def cost_basis(self) -> Decimal:
        return self.num_shares * self.avg_price_per_share
