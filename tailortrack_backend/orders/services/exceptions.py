# orders/services/exceptions.py

"""
ORDER SERVICE ERRORS

Centralized domain errors for order services.
Views map these to HTTP responses.
"""


class OrderServiceError(Exception):
    """Base exception for all order service failures."""


class IdentifierGenerationError(OrderServiceError):
    """Raised when a unique barcode / order number cannot be produced."""


class InvalidOrderStatusError(OrderServiceError):
    """Raised when a status value is not a known workflow stage."""


class OrderNotReadyError(OrderServiceError):
    """Raised when pickup is requested before the order is ready."""


class PaymentRequiredError(OrderServiceError):
    """Raised when pickup is requested on a priced order that is not fully paid."""
