"""
Error taxonomy for the storefront.

Every error carries a human-readable message (sent to the client as
``{"error": message}``), a machine code and the HTTP status it maps to.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""
    status_code = 400

    def __init__(self, message: str, code: str = "STOREFRONT_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class InvalidArgument(StorefrontError):
    def __init__(self, message: str = "Invalid id"):
        super().__init__(message, code="INVALID_ARGUMENT")


class NotFound(StorefrontError):
    status_code = 404

    def __init__(self, what: str = "Resource"):
        self.what = what
        super().__init__(f"{what} not found", code="NOT_FOUND")


class Unauthorized(StorefrontError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="UNAUTHORIZED")


class OrderPersistenceFailed(StorefrontError):
    status_code = 500

    def __init__(self, message: str = "Server error while placing the order."):
        super().__init__(message, code="ORDER_PERSISTENCE_FAILED")


# ---- Checkout validation (client-correctable, 400) ----

class CheckoutError(StorefrontError):
    """Raised by order validation; nothing has been written when it surfaces."""


class MissingField(CheckoutError):
    def __init__(self):
        super().__init__("Please complete the required buyer details.", code="MISSING_FIELD")


class InvalidEmail(CheckoutError):
    def __init__(self):
        super().__init__("Invalid email format.", code="INVALID_EMAIL")


class InvalidShipping(CheckoutError):
    def __init__(self):
        super().__init__("Invalid shipping method.", code="INVALID_SHIPPING")


class InvalidPayment(CheckoutError):
    def __init__(self):
        super().__init__("Invalid payment method.", code="INVALID_PAYMENT")


class EmptyCart(CheckoutError):
    def __init__(self):
        super().__init__("Cart is empty.", code="EMPTY_CART")


class InvalidItem(CheckoutError):
    def __init__(self):
        super().__init__("Invalid cart item.", code="INVALID_ITEM")


class ProductNotFound(CheckoutError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product id {product_id} not found.", code="PRODUCT_NOT_FOUND")


class InsufficientStock(CheckoutError):
    def __init__(self, product_name: str):
        self.product_name = product_name
        super().__init__(f"Insufficient stock for {product_name}.", code="INSUFFICIENT_STOCK")
