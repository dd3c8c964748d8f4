"""
Order-specific exceptions.

Usage:
    from orders.exceptions import CheckoutValidationError

    raise CheckoutValidationError(
        "Cart is empty",
        error_code=CheckoutValidationError.EMPTY_CART,
    )
"""

from core.exceptions import ValidationError


class CheckoutValidationError(ValidationError):
    """
    Raised when a cart fails server-side validation.

    Nothing has been written when this is raised. Views return 400 with
    ``to_dict()``.
    """

    default_error_code = "CHECKOUT_INVALID"

    EMPTY_CART = "EMPTY_CART"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PRODUCT_INACTIVE = "PRODUCT_INACTIVE"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    BELOW_MINIMUM_ORDER = "BELOW_MINIMUM_ORDER"
