from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from orders.services.pricing import (
    PAYMENT_PAID,
    PAYMENT_PARTIAL,
    PAYMENT_PENDING,
    derive_payment_status,
    items_subtotal,
    money,
    normalize_item,
    recompute_financials,
)


def _order(**kwargs):
    defaults = {
        "items": [],
        "discount": Decimal("0"),
        "amount": Decimal("0"),
        "advance_amount": Decimal("0"),
        "subtotal": Decimal("0"),
        "balance_amount": Decimal("0"),
        "payment_status": PAYMENT_PENDING,
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


class PaymentStatusRuleTests(SimpleTestCase):
    """
    GUARANTEES:
    - paid    iff advance >= amount > 0
    - partial iff 0 < advance < amount
    - pending otherwise (a zero amount is never paid)
    """

    def test_rule_table(self):
        cases = [
            ("0", "0", PAYMENT_PENDING),
            ("0", "100", PAYMENT_PENDING),
            ("450", "0", PAYMENT_PENDING),
            ("450", "200", PAYMENT_PARTIAL),
            ("450", "450", PAYMENT_PAID),
            ("450", "500", PAYMENT_PAID),
        ]
        for amount, advance, expected in cases:
            with self.subTest(amount=amount, advance=advance):
                self.assertEqual(derive_payment_status(amount, advance), expected)


class RecomputeFinancialsTests(SimpleTestCase):
    def test_items_drive_subtotal_and_amount(self):
        order = _order(
            items=[
                {"cloth_type": "shirt", "quantity": 2, "price": "250.00"},
                {"cloth_type": "pants", "quantity": 1, "price": "300.00"},
            ],
            discount=Decimal("100"),
            amount=Decimal("9999"),
            advance_amount=Decimal("200"),
        )

        recompute_financials(order)

        self.assertEqual(order.subtotal, Decimal("800.00"))
        self.assertEqual(order.amount, Decimal("700.00"))
        self.assertEqual(order.balance_amount, Decimal("500.00"))
        self.assertEqual(order.payment_status, PAYMENT_PARTIAL)

    def test_legacy_amount_kept_verbatim(self):
        order = _order(amount=Decimal("1200"), advance_amount=Decimal("1200"))

        recompute_financials(order)

        self.assertEqual(order.amount, Decimal("1200.00"))
        self.assertEqual(order.balance_amount, Decimal("0.00"))
        self.assertEqual(order.payment_status, PAYMENT_PAID)

    def test_emptied_items_reset_subtotal(self):
        order = _order(subtotal=Decimal("800.00"), amount=Decimal("750.00"))

        recompute_financials(order)

        self.assertEqual(order.subtotal, Decimal("0.00"))
        self.assertEqual(order.amount, Decimal("750.00"))

    def test_overpayment_leaves_negative_balance(self):
        order = _order(amount=Decimal("100"), advance_amount=Decimal("150"))

        recompute_financials(order)

        self.assertEqual(order.balance_amount, Decimal("-50.00"))
        self.assertEqual(order.payment_status, PAYMENT_PAID)

    def test_balance_identity_holds(self):
        order = _order(
            items=[{"cloth_type": "suit", "quantity": 3, "price": "333.33"}],
            discount=Decimal("0.99"),
            advance_amount=Decimal("10.10"),
        )
        recompute_financials(order)
        self.assertEqual(order.balance_amount, order.amount - order.advance_amount)


class ItemNormalizationTests(SimpleTestCase):
    def test_aliases_and_defaults(self):
        item = normalize_item({"itemType": "Kurta"})

        self.assertEqual(item["cloth_type"], "kurta")
        self.assertEqual(item["quantity"], 1)
        self.assertEqual(item["price"], "0.00")
        self.assertEqual(item["measurements"], {})

    def test_rejects_bad_values(self):
        for raw in (
            {"cloth_type": "hat"},
            {"cloth_type": "shirt", "quantity": 0},
            {"cloth_type": "shirt", "quantity": 2.7},
            {"cloth_type": "shirt", "quantity": "two"},
            {"cloth_type": "shirt", "quantity": True},
            {"cloth_type": "shirt", "quantity": -3},
            {"cloth_type": "shirt", "price": "-1"},
            {"cloth_type": "shirt", "price": "abc"},
            "shirt",
        ):
            with self.subTest(raw=raw):
                with self.assertRaises(ValueError):
                    normalize_item(raw)

    def test_subtotal_and_money(self):
        self.assertEqual(items_subtotal([{"price": "10.005", "quantity": 2}]), Decimal("20.02"))
        self.assertEqual(money(None), Decimal("0.00"))
        self.assertEqual(money("2.345"), Decimal("2.35"))

    def test_whole_number_quantities_accepted(self):
        self.assertEqual(normalize_item({"cloth_type": "shirt", "quantity": "3"})["quantity"], 3)
        self.assertEqual(normalize_item({"cloth_type": "shirt", "quantity": 2.0})["quantity"], 2)
        self.assertEqual(normalize_item({"cloth_type": "shirt", "quantity": None})["quantity"], 1)
