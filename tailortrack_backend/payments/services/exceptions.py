# payments/services/exceptions.py


class PaymentServiceError(Exception):
    pass


class OrderNotFoundError(PaymentServiceError):
    pass


class InvalidPaymentAmountError(PaymentServiceError):
    pass


class InvalidSignatureError(PaymentServiceError):
    pass


class GatewayNotConfiguredError(PaymentServiceError):
    pass


class GatewayError(PaymentServiceError):
    """Payment gateway rejected the call or could not be reached."""
