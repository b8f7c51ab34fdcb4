from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, Optional

if TYPE_CHECKING:
    from shopmetrics.ports.shop_model import ShopModel

from shopmetrics.adapters.databricks.client import DatabricksSqlClient
from shopmetrics.adapters.databricks.shop_repo import DatabricksShopRepository
from shopmetrics.adapters.in_memory.shop_repo import InMemoryShopRepository
from shopmetrics.settings import Settings, get_settings

ADAPTERS = ("memory", "databricks")


def _validate_databricks_settings(settings: Settings) -> None:
    required_settings = [
        ("DATABRICKS_SERVER_HOSTNAME", settings.databricks_server_hostname),
        ("DATABRICKS_HTTP_PATH", settings.databricks_http_path),
        ("DATABRICKS_ACCESS_TOKEN", settings.databricks_access_token),
    ]
    missing = [name for name, value in required_settings if not value]
    if missing:
        raise ValueError(f"Missing required Databricks settings: {', '.join(missing)}")


def create_shop_model(
    adapter_name: Optional[str] = None,
    settings: Optional[Settings] = None,
    client: Optional[DatabricksSqlClient] = None,
) -> "ShopModel":
    """
    Create the shop model for the given adapter name.

    "memory" (the default) returns an in-memory model seeded with demo data.
    "databricks" returns a model backed by the given client, or by a new
    client built from settings.
    """
    settings = settings or get_settings()
    adapter_name = (adapter_name or settings.shop_adapters).lower()

    if adapter_name == "databricks":
        _validate_databricks_settings(settings)
        return DatabricksShopRepository(client or DatabricksSqlClient(settings), settings)
    if adapter_name == "memory":
        return InMemoryShopRepository.with_demo_data()
    raise ValueError(f"Unknown shop adapter {adapter_name!r}; expected one of {', '.join(ADAPTERS)}")


@contextmanager
def open_shop_model(
    adapter_name: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Iterator["ShopModel"]:
    """Yield a connected shop model; any connection is closed on exit."""
    settings = settings or get_settings()
    adapter_name = (adapter_name or settings.shop_adapters).lower()

    if adapter_name != "databricks":
        yield create_shop_model(adapter_name, settings)
        return

    _validate_databricks_settings(settings)
    with DatabricksSqlClient(settings) as client:
        client.connect()
        yield create_shop_model(adapter_name, settings, client=client)
