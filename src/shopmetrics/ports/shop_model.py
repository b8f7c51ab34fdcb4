from __future__ import annotations

from datetime import datetime
from typing import Protocol


class ShopModel(Protocol):
    def count_customers(self, since: datetime) -> int: ...

    def count_sales(self, since: datetime) -> float: ...
