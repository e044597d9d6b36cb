"""
Error types raised by the catalog core and mapped to HTTP status codes.
"""
from typing import Optional


class CatalogError(Exception):
    """Base class for all catalog errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgumentError(CatalogError):
    """Missing required fields, empty search query or malformed filter."""

    status_code = 400


class ProductNotFoundError(CatalogError):
    """Operation targets a product id that does not exist."""

    status_code = 404

    def __init__(self, product_id: int, message: Optional[str] = None):
        super().__init__(message or "Product not found")
        self.product_id = product_id


class StoreUnavailableError(CatalogError):
    """Connection, pool or timeout failure talking to the store."""

    status_code = 500


class StoreQueryFailureError(CatalogError):
    """The store rejected or failed a well-formed statement."""

    status_code = 500
