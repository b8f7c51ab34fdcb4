from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from shopmetrics.app.arguments import ArgumentReader, ExactOptionParser, ParsedOptions
from shopmetrics.app.factory import ADAPTERS, open_shop_model
from shopmetrics.application.errors import ShopMetricsError
from shopmetrics.domain.sales_rate import calculate_sales_rate
from shopmetrics.observability.logging import configure_logging
from shopmetrics.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def build_repeat_reader() -> ArgumentReader:
    # Defaults double as the values shown by -h
    reader = ArgumentReader(prog="shopmetrics repeat")
    reader.add_string("test", "default test msg", "Enter a string test message")
    reader.add_int("intflag", 5, "Enter the number of times the test msg flag should run")
    return reader


def run_repeat(options: ParsedOptions) -> int:
    for i in range(options["intflag"]):
        print(i, options["test"])
    return 0


def run_sales_rate(adapter_name: Optional[str], settings: Settings) -> int:
    try:
        with open_shop_model(adapter_name, settings) as shop_model:
            rate = calculate_sales_rate(shop_model)
    except (ShopMetricsError, ValueError) as e:
        logger.exception(f"Sales rate calculation failed: {e}")
        return 1
    print(rate)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    settings = get_settings()
    parser = ExactOptionParser(prog="shopmetrics", description="Shop metrics CLI")
    subparsers = parser.add_subparsers(dest="command")

    repeat_reader = build_repeat_reader()
    repeat_parser = subparsers.add_parser("repeat", help="Print a test message a number of times")
    repeat_reader.register(repeat_parser)

    rate_parser = subparsers.add_parser("sales-rate", help="Print sales per customer over the last 24 hours")
    rate_parser.add_argument(
        "--adapters",
        choices=ADAPTERS,
        default=None,
        help=f"Shop data source (default: SHOP_ADAPTERS or {settings.shop_adapters!r})",
    )

    args = parser.parse_args(argv)
    if args.command == "repeat":
        return run_repeat(repeat_reader.resolve(args))
    if args.command == "sales-rate":
        return run_sales_rate(args.adapters, settings)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
