# payments/urls.py

from django.urls import path

from payments.views import (
    CreateGatewayOrderView,
    OrderPaymentsView,
    PaymentDetailView,
    PaymentListCreateView,
    RazorpayWebhookView,
    VerifyPaymentView,
)

app_name = "payments"

urlpatterns = [
    path("", PaymentListCreateView.as_view(), name="list-create"),
    path("create-order/", CreateGatewayOrderView.as_view(), name="create-order"),
    path("verify/", VerifyPaymentView.as_view(), name="verify"),
    path("verify-payment/", VerifyPaymentView.as_view(), name="verify-payment"),
    path("webhook/", RazorpayWebhookView.as_view(), name="webhook"),
    path("order/<uuid:order_id>/", OrderPaymentsView.as_view(), name="order-payments"),
    path("<uuid:pk>/", PaymentDetailView.as_view(), name="detail"),
]
