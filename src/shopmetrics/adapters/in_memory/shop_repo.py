from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple

from shopmetrics.ports.shop_model import ShopModel

SaleRecord = Tuple[datetime, float]


class InMemoryShopRepository(ShopModel):
    """Shop model over in-process lists of customer and sale timestamps."""

    def __init__(
        self,
        customers: Optional[Iterable[datetime]] = None,
        sales: Optional[Iterable[SaleRecord]] = None,
    ) -> None:
        self.customers: List[datetime] = list(customers or [])
        self.sales: List[SaleRecord] = list(sales or [])

    @classmethod
    def with_demo_data(cls, now: Optional[datetime] = None) -> "InMemoryShopRepository":
        # Provide a minimal default example when none supplied
        now = now or datetime.now(timezone.utc)
        customers = [now - timedelta(hours=h) for h in (1, 3, 6, 12, 30)]
        sales = [(now - timedelta(hours=h), 19.99) for h in (1, 2, 3, 5, 6, 8, 12, 13, 40)]
        return cls(customers=customers, sales=sales)

    def count_customers(self, since: datetime) -> int:
        return sum(1 for ts in self.customers if ts > since)

    def count_sales(self, since: datetime) -> float:
        return float(sum(1 for ts, _amount in self.sales if ts > since))
