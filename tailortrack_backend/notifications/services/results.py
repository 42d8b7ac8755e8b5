# notifications/services/results.py

from __future__ import annotations

from dataclasses import dataclass

CHANNEL_SMS = "sms"
CHANNEL_EMAIL = "email"
CHANNEL_IN_APP = "in_app"


@dataclass(frozen=True)
class DeliveryResult:
    """
    Outcome of one delivery attempt. Providers never raise to callers.

    configured=False means the channel has no credentials; nothing was sent.
    """

    ok: bool
    channel: str
    detail: str = ""
    provider_id: str = ""
    configured: bool = True

    @classmethod
    def not_configured(cls, channel: str, detail: str) -> "DeliveryResult":
        return cls(ok=False, channel=channel, detail=detail, configured=False)
