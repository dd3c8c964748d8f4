"""
Catalog exceptions.
"""

from core.exceptions import ValidationError


class InvalidStockQuantityError(ValidationError):
    """Stock quantity argument is not a valid count."""

    default_error_code = "INVALID_STOCK_QUANTITY"
