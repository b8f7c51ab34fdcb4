from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from shopmetrics.adapters.databricks.client import DatabricksSqlClient
from shopmetrics.application.errors import ShopMetricsError, ShopQueryError
from shopmetrics.ports.shop_model import ShopModel
from shopmetrics.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class DatabricksShopRepository(ShopModel):
    """Shop model that counts rows in Databricks customer and sales tables."""

    def __init__(self, client: DatabricksSqlClient, settings: Settings | None = None) -> None:
        self.client = client
        self.settings = settings or get_settings()

    def _build_table_name(self, table_name: str) -> str:
        """Build fully qualified table name with catalog and schema if specified."""
        parts = []
        if self.settings.databricks_catalog:
            parts.append(self.settings.databricks_catalog)
        if self.settings.databricks_schema:
            parts.append(self.settings.databricks_schema)
        parts.append(f"{self.settings.databricks_table_prefix}{table_name}")
        return ".".join(parts)

    def _count_since(self, table_name: str, since: datetime) -> Any:
        full_name = self._build_table_name(table_name)
        sql = f"SELECT count(*) AS count FROM {full_name} WHERE `timestamp` > ?"
        try:
            rows = self.client.query(sql, params=[since])
        except ShopMetricsError:
            raise
        except Exception as e:
            raise ShopQueryError(f"Count query on {full_name} failed: {e}", table_name=full_name) from e

        if not rows:
            raise ShopQueryError(f"Count query on {full_name} returned no rows", table_name=full_name)
        count = rows[0]["count"]
        logger.debug(f"{full_name}: {count} rows since {since.isoformat()}")
        return count

    def count_customers(self, since: datetime) -> int:
        return int(self._count_since(self.settings.shop_customers_table, since))

    def count_sales(self, since: datetime) -> float:
        return float(self._count_since(self.settings.shop_sales_table, since))
