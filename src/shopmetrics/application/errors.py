class ShopMetricsError(Exception):
    pass


class ArgumentReaderError(ShopMetricsError):
    """Raised when options are declared or read out of order."""


class ShopConnectionError(ShopMetricsError):
    """Raised when the shop data store cannot be reached."""


class ShopQueryError(ShopMetricsError):
    """Raised when a counting query against the shop data store fails."""

    def __init__(self, message: str, table_name: str | None = None) -> None:
        super().__init__(message)
        self.table_name = table_name
