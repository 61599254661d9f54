"""Exception types raised by the restock job."""


class RestockBotError(Exception):
    """Base class for job errors."""

    pass


class ConfigError(RestockBotError):
    """Raised when the run configuration is missing, unreadable or invalid."""

    pass


class QueryError(RestockBotError):
    """Raised when the source database is unreachable or a query fails."""

    pass


class LookupFailure(RestockBotError):
    """Per-item failure while resolving a component record."""

    def __init__(self, sku: str, message: str):
        super().__init__(f"{message}: {sku}")
        self.sku = sku


class InvalidSku(LookupFailure):
    """Raised when a sku does not follow the refurbished naming convention."""

    def __init__(self, sku: str):
        super().__init__(sku, "Invalid SKU format")


class LookupNotFound(LookupFailure):
    """Raised when a component record does not exist for a sku."""

    def __init__(self, sku: str, condition: str = "Component"):
        super().__init__(sku, f"{condition} not found")
        self.condition = condition


class EnrichmentError(RestockBotError):
    """Raised when every component lookup in a batch failed."""

    def __init__(self, failures: list[Exception]):
        super().__init__(f"All {len(failures)} component lookups failed")
        self.failures = failures


class DeliveryError(RestockBotError):
    """Raised when the chat platform rejects or cannot receive a message."""

    pass
