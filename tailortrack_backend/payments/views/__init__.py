from .gateway import CreateGatewayOrderView, VerifyPaymentView
from .payments import OrderPaymentsView, PaymentDetailView, PaymentListCreateView
from .webhook import RazorpayWebhookView

__all__ = [
    "CreateGatewayOrderView",
    "OrderPaymentsView",
    "PaymentDetailView",
    "PaymentListCreateView",
    "RazorpayWebhookView",
    "VerifyPaymentView",
]
