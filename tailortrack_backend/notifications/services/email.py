# notifications/services/email.py
"""
Templated email through Django's mail framework.

Templates: notifications/<name>.txt (plain) + notifications/<name>.html (alternative).
SMTP without credentials counts as "not configured".
"""

from __future__ import annotations

import logging
from smtplib import SMTPException

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from notifications.services.results import CHANNEL_EMAIL, DeliveryResult

logger = logging.getLogger(__name__)

SMTP_BACKEND = "django.core.mail.backends.smtp.EmailBackend"


def email_configured() -> bool:
    if getattr(settings, "EMAIL_BACKEND", "") != SMTP_BACKEND:
        return True
    return bool(getattr(settings, "EMAIL_HOST_USER", "") and getattr(settings, "EMAIL_HOST_PASSWORD", ""))


def send_templated_email(*, to: str, subject: str, template: str, context: dict) -> DeliveryResult:
    to = (to or "").strip()
    if not to:
        return DeliveryResult(ok=False, channel=CHANNEL_EMAIL, detail="Missing email address")

    if not email_configured():
        logger.warning("Email not sent: SMTP credentials missing", extra={"template": template})
        return DeliveryResult.not_configured(CHANNEL_EMAIL, "Email not configured")

    text_body = render_to_string(f"notifications/{template}.txt", context)
    html_body = render_to_string(f"notifications/{template}.html", context)

    message = EmailMultiAlternatives(
        subject=subject,
        body=text_body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to],
    )
    message.attach_alternative(html_body, "text/html")

    try:
        sent = message.send()
    except (SMTPException, OSError) as exc:
        logger.warning("Email send failed", extra={"template": template, "error": str(exc)})
        return DeliveryResult(ok=False, channel=CHANNEL_EMAIL, detail=str(exc))

    logger.info("Email sent", extra={"template": template, "sent": sent})
    return DeliveryResult(ok=bool(sent), channel=CHANNEL_EMAIL, detail="sent" if sent else "not sent")
