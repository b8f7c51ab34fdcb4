from __future__ import annotations

import logging
from typing import Any, Optional

from databricks import sql as databricks_sql

from shopmetrics.application.errors import ShopConnectionError
from shopmetrics.settings import Settings

logger = logging.getLogger(__name__)


class DatabricksSqlClient:
    """Client for executing SQL queries against Databricks using the SQL Connector."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._connection: Optional[Any] = None

    def connect(self) -> Any:
        """Open the connection if it is not open yet."""
        if self._connection is None:
            if not all(
                [
                    self.settings.databricks_server_hostname,
                    self.settings.databricks_http_path,
                    self.settings.databricks_access_token,
                ]
            ):
                raise ValueError(
                    "Databricks connection requires DATABRICKS_SERVER_HOSTNAME, "
                    "DATABRICKS_HTTP_PATH, and DATABRICKS_ACCESS_TOKEN"
                )

            logger.info(f"Connecting to Databricks server: {self.settings.databricks_server_hostname}")

            connection_params = {
                "server_hostname": self.settings.databricks_server_hostname,
                "http_path": self.settings.databricks_http_path,
                "access_token": self.settings.databricks_access_token,
            }

            if self.settings.databricks_catalog:
                connection_params["catalog"] = self.settings.databricks_catalog
            if self.settings.databricks_schema:
                connection_params["schema"] = self.settings.databricks_schema

            try:
                self._connection = databricks_sql.connect(**connection_params)
            except Exception as e:
                raise ShopConnectionError(
                    f"Could not connect to Databricks server {self.settings.databricks_server_hostname}: {e}"
                ) from e

        return self._connection

    def query(self, sql: str, params: Optional[list[Any] | dict[str, Any]] = None) -> list[dict[str, Any]]:
        """
        Execute a SELECT query and return results as a list of dictionaries.

        Args:
            sql: SQL query string with ? placeholders for positional params
            params: List of parameters (positional) or dict (named) to substitute

        Returns:
            List of dictionaries, one per row
        """
        logger.debug(f"Executing query: {sql[:200]}...")

        conn = self.connect()
        cursor = conn.cursor()
        try:
            if params:
                cursor.execute(sql, parameters=params)
            else:
                cursor.execute(sql)
            columns = [desc[0] for desc in cursor.description]
            rows = cursor.fetchall()
            return [dict(zip(columns, row)) for row in rows]
        finally:
            cursor.close()

    def close(self) -> None:
        """Close the connection."""
        if self._connection:
            try:
                self._connection.close()
                logger.info("Closed Databricks connection")
            except Exception as e:
                logger.warning(f"Error closing connection: {e}")
            finally:
                self._connection = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False
