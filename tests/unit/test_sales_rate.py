import logging
import math
import re
from datetime import datetime, timedelta, timezone

import pytest

from shopmetrics.adapters.in_memory.shop_repo import InMemoryShopRepository
from shopmetrics.application.errors import ShopQueryError
from shopmetrics.domain.sales_rate import (
    SALES_RATE_WINDOW,
    calculate_sales_rate,
    compute_rate,
    format_rate,
)

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
RATE_PATTERN = re.compile(r"^-?\d+\.\d{2}$")


class FakeShopModel:
    """Returns fixed counts and records every call."""

    def __init__(self, sales=0.0, customers=0, sales_error=None, customers_error=None):
        self.sales = sales
        self.customers = customers
        self.sales_error = sales_error
        self.customers_error = customers_error
        self.calls = []

    def count_sales(self, since):
        self.calls.append(("count_sales", since))
        if self.sales_error:
            raise self.sales_error
        return self.sales

    def count_customers(self, since):
        self.calls.append(("count_customers", since))
        if self.customers_error:
            raise self.customers_error
        return self.customers


def test_even_rate():
    assert calculate_sales_rate(FakeShopModel(sales=10, customers=5), now=NOW) == "2.00"


def test_rate_is_rounded_to_two_places():
    assert calculate_sales_rate(FakeShopModel(sales=7, customers=3), now=NOW) == "2.33"


@pytest.mark.parametrize(
    "sales,customers",
    [(0, 1), (1, 3), (2, 3), (1000, 7), (123456.0, 11), (5, 1000)],
)
def test_rate_always_has_two_decimal_places(sales, customers):
    rate = calculate_sales_rate(FakeShopModel(sales=sales, customers=customers), now=NOW)
    assert RATE_PATTERN.match(rate)
    assert rate == "%.2f" % (sales / customers)


def test_counts_sales_then_customers_over_trailing_day():
    shop = FakeShopModel(sales=4, customers=2)
    calculate_sales_rate(shop, now=NOW)

    since = NOW - timedelta(hours=24)
    assert shop.calls == [("count_sales", since), ("count_customers", since)]
    assert SALES_RATE_WINDOW == timedelta(hours=24)


def test_every_call_recounts():
    shop = FakeShopModel(sales=10, customers=5)

    assert calculate_sales_rate(shop, now=NOW) == "2.00"
    shop.sales = 15
    shop.customers = 4
    assert calculate_sales_rate(shop, now=NOW) == "3.75"

    assert [name for name, _ in shop.calls] == [
        "count_sales",
        "count_customers",
        "count_sales",
        "count_customers",
    ]


def test_sales_failure_short_circuits():
    error = ShopQueryError("sales table unavailable")
    shop = FakeShopModel(customers=3, sales_error=error)

    with pytest.raises(ShopQueryError) as exc_info:
        calculate_sales_rate(shop, now=NOW)

    assert exc_info.value is error
    assert [name for name, _ in shop.calls] == ["count_sales"]


def test_customers_failure_propagates():
    error = ShopQueryError("customers table unavailable")
    shop = FakeShopModel(sales=3, customers_error=error)

    with pytest.raises(ShopQueryError) as exc_info:
        calculate_sales_rate(shop, now=NOW)

    assert exc_info.value is error
    assert [name for name, _ in shop.calls] == ["count_sales", "count_customers"]


def test_zero_customers_formats_non_finite_rate(caplog):
    with caplog.at_level(logging.WARNING, logger="shopmetrics.domain.sales_rate"):
        assert calculate_sales_rate(FakeShopModel(sales=3, customers=0), now=NOW) == "+Inf"
        assert calculate_sales_rate(FakeShopModel(sales=0, customers=0), now=NOW) == "NaN"

    warnings = [
        r for r in caplog.records if r.name == "shopmetrics.domain.sales_rate" and r.levelno == logging.WARNING
    ]
    assert len(warnings) == 2


def test_finite_rate_logs_no_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="shopmetrics.domain.sales_rate"):
        calculate_sales_rate(FakeShopModel(sales=10, customers=5), now=NOW)
    assert not [r for r in caplog.records if r.name == "shopmetrics.domain.sales_rate"]


def test_compute_rate_zero_customers():
    assert compute_rate(-2.0, 0) == -math.inf
    assert math.isnan(compute_rate(0.0, 0))
    assert format_rate(compute_rate(-2.0, 0)) == "-Inf"
    assert format_rate(math.inf) == "+Inf"
    assert format_rate(math.nan) == "NaN"


def test_implementations_with_equal_counts_agree():
    in_memory = InMemoryShopRepository(
        customers=[NOW - timedelta(hours=h) for h in (1, 2, 3)],
        sales=[(NOW - timedelta(hours=h), 9.5) for h in (1, 4, 5, 6, 7, 8, 9)],
    )
    fake = FakeShopModel(sales=7.0, customers=3)

    assert calculate_sales_rate(in_memory, now=NOW) == calculate_sales_rate(fake, now=NOW) == "2.33"
