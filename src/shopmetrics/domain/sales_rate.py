from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Optional

from shopmetrics.ports.shop_model import ShopModel

logger = logging.getLogger(__name__)

SALES_RATE_WINDOW = timedelta(hours=24)


def window_start(now: Optional[datetime] = None) -> datetime:
    return (now or datetime.now(timezone.utc)) - SALES_RATE_WINDOW


def compute_rate(sales: float, customers: int) -> float:
    """
    Divide sales by customers.

    A zero customer count yields inf, -inf or nan instead of raising, so the
    result can still be formatted.
    """
    if customers == 0:
        if sales == 0:
            return math.nan
        return math.copysign(math.inf, sales)
    return float(sales) / float(customers)


def format_rate(rate: float) -> str:
    # Non-finite rates are spelled +Inf, -Inf and NaN
    if math.isnan(rate):
        return "NaN"
    if math.isinf(rate):
        return "+Inf" if rate > 0 else "-Inf"
    return "%.2f" % rate


def calculate_sales_rate(shop_model: ShopModel, now: Optional[datetime] = None) -> str:
    """
    Compute sales per customer over the trailing 24 hours.

    Sales are counted before customers; an exception from either count
    propagates and the other is not retried.

    Returns:
        The rate with exactly two fractional digits, e.g. "2.33"
    """
    since = window_start(now)

    sales = shop_model.count_sales(since)
    customers = shop_model.count_customers(since)

    rate = compute_rate(sales, customers)
    if not math.isfinite(rate):
        logger.warning(f"No customers since {since.isoformat()}; sales rate is {rate}")
    return format_rate(rate)
