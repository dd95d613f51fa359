# core/exceptions.py

"""
SHOP SERVICE ERRORS

Centralized domain errors shared by cart, catalog, orders and production
services. Views translate them into the API error envelope via
core.api.domain_error_response.
"""


class ShopError(Exception):
    """Base exception for all shop service failures."""

    code = "SHOP_ERROR"

    def __init__(self, message: str = "", *, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationError(ShopError):
    """Input or state rule violated; never silently corrected."""

    code = "VALIDATION_ERROR"


class InvalidTransitionError(ValidationError):
    """Raised when a status change is not allowed by the lifecycle rules."""

    code = "INVALID_TRANSITION"

    def __init__(self, *, from_status: str, to_status: str, reason: str = ""):
        message = f"Cannot transition from '{from_status}' to '{to_status}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.from_status = from_status
        self.to_status = to_status


class ConflictError(ShopError):
    """Persisted state no longer matches what the caller read."""

    code = "CONFLICT"


class NotFoundError(ShopError):
    """Referenced entity does not exist."""

    code = "NOT_FOUND"


class PaymentGatewayError(ShopError):
    """Payment provider rejected or failed a request."""

    code = "PAYMENT_GATEWAY_ERROR"
