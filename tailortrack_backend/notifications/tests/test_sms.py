import io
import json
from unittest import mock
from urllib.error import HTTPError

from django.test import SimpleTestCase, override_settings

from notifications.services.phones import mask_phone, normalize_phone
from notifications.services.sms import send_sms, sms_configured

LIVE_TWILIO = {
    "TWILIO": {"ACCOUNT_SID": "AC123", "AUTH_TOKEN": "secret", "FROM_NUMBER": "+15550001111"},
}


class PhoneTests(SimpleTestCase):
    def test_normalize(self):
        self.assertEqual(normalize_phone("98765 43210"), "+919876543210")
        self.assertEqual(normalize_phone("+1 (555) 000-1111"), "+15550001111")
        self.assertEqual(normalize_phone(""), "")

    def test_mask_keeps_last_four(self):
        self.assertEqual(mask_phone("+919876543210"), "********3210")
        self.assertEqual(mask_phone("12"), "**")


class SmsTests(SimpleTestCase):
    """
    GUARANTEES:
    - placeholder or blank credentials never reach the network
    - provider errors come back as ok=False, not exceptions
    """

    @override_settings(
        NOTIFICATIONS={"TWILIO": {"ACCOUNT_SID": "your_account_sid", "AUTH_TOKEN": "x", "FROM_NUMBER": "+1"}}
    )
    def test_placeholder_credentials(self):
        self.assertFalse(sms_configured())
        with mock.patch("notifications.services.sms.urlopen") as opener:
            result = send_sms(to="9876543210", body="hi")
        opener.assert_not_called()
        self.assertFalse(result.ok)
        self.assertFalse(result.configured)

    @override_settings(NOTIFICATIONS=LIVE_TWILIO)
    def test_sent(self):
        opener = mock.MagicMock()
        opener.return_value.__enter__.return_value.read.return_value = json.dumps(
            {"sid": "SM42", "status": "queued"}
        ).encode("utf-8")

        with mock.patch("notifications.services.sms.urlopen", opener):
            result = send_sms(to="9876543210", body="Order placed")

        self.assertTrue(result.ok)
        self.assertEqual(result.provider_id, "SM42")
        request = opener.call_args.args[0]
        self.assertTrue(request.full_url.endswith("/Accounts/AC123/Messages.json"))
        self.assertIn(b"To=%2B919876543210", request.data)

    @override_settings(NOTIFICATIONS=LIVE_TWILIO)
    def test_provider_rejects(self):
        error = HTTPError(
            "https://api.twilio.com", 400, "Bad Request", {}, io.BytesIO(b'{"message": "Invalid To number"}')
        )
        with mock.patch("notifications.services.sms.urlopen", side_effect=error):
            result = send_sms(to="123", body="x")

        self.assertFalse(result.ok)
        self.assertTrue(result.configured)
        self.assertIn("Invalid To number", result.detail)
