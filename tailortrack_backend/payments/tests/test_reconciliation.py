from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase

from orders.services.creation import create_order
from payments.models import Payment
from payments.services.exceptions import InvalidPaymentAmountError, OrderNotFoundError
from payments.services.reconciliation import apply_payment

User = get_user_model()


class ApplyPaymentTests(TestCase):
    """
    GUARANTEES:
    - every applied payment moves advance, balance and payment status together
    - overpayment is accepted and shows as a negative balance
    - a gateway payment id is applied at most once
    - nothing is written for a missing order or a non-positive amount
    """

    def setUp(self):
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.order = create_order(
            data={"customer_name": "Asha", "phone_number": "9876543210", "cloth_type": "suit", "amount": 1000},
            actor=self.staff,
        )

    def test_partial_then_full(self):
        apply_payment(order_id=self.order.id, amount="400", method=Payment.METHOD_CASH, actor=self.staff)
        self.order.refresh_from_db()
        self.assertEqual(self.order.advance_amount, Decimal("400.00"))
        self.assertEqual(self.order.balance_amount, Decimal("600.00"))
        self.assertEqual(self.order.payment_status, "partial")

        payment, created = apply_payment(order_id=self.order.id, amount="600", method=Payment.METHOD_UPI)
        self.order.refresh_from_db()
        self.assertTrue(created)
        self.assertEqual(payment.payment_status, Payment.STATUS_COMPLETED)
        self.assertEqual(self.order.balance_amount, Decimal("0.00"))
        self.assertEqual(self.order.payment_status, "paid")

    def test_overpayment(self):
        apply_payment(order_id=self.order.id, amount="1200", method=Payment.METHOD_CARD)
        self.order.refresh_from_db()
        self.assertEqual(self.order.balance_amount, Decimal("-200.00"))
        self.assertEqual(self.order.payment_status, "paid")

    def test_gateway_replay_is_idempotent(self):
        first, created = apply_payment(
            order_id=self.order.id, amount="500", method=Payment.METHOD_GATEWAY, gateway_payment_id="pay_1"
        )
        again, created_again = apply_payment(
            order_id=self.order.id, amount="500", method=Payment.METHOD_GATEWAY, gateway_payment_id="pay_1"
        )

        self.assertTrue(created)
        self.assertFalse(created_again)
        self.assertEqual(first.pk, again.pk)
        self.order.refresh_from_db()
        self.assertEqual(self.order.advance_amount, Decimal("500.00"))
        self.assertEqual(Payment.objects.count(), 1)

    def test_missing_order(self):
        with self.assertRaises(OrderNotFoundError):
            apply_payment(
                order_id="00000000-0000-0000-0000-000000000000", amount="10", method=Payment.METHOD_CASH
            )
        self.assertEqual(Payment.objects.count(), 0)

    def test_non_positive_amount(self):
        for amount in ("0", "-5", "abc"):
            with self.subTest(amount=amount), self.assertRaises(InvalidPaymentAmountError):
                apply_payment(order_id=self.order.id, amount=amount, method=Payment.METHOD_CASH)
        self.assertEqual(Payment.objects.count(), 0)

    def test_payments_are_immutable(self):
        payment, _ = apply_payment(order_id=self.order.id, amount="100", method=Payment.METHOD_CASH)
        payment.amount = Decimal("1.00")
        with self.assertRaises(ValueError):
            payment.save()
