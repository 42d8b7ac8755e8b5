# users/auth_backends.py
"""
ACCOUNT LOGIN BACKEND

Identifier forms:
- contains "@"          -> email (case-insensitive)
- digits, spaces, +, -  -> phone (separators ignored, must match one account)
- anything else         -> username (case-insensitive)

Disabled accounts never authenticate.
"""

from __future__ import annotations

import re

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

PHONE_IDENTIFIER = re.compile(r"^\+?[\d\s\-()]{6,}$")


def identifier_lookup(identifier: str) -> dict | None:
    identifier = (identifier or "").strip()
    if not identifier:
        return None
    if "@" in identifier:
        return {"email__iexact": identifier}
    if PHONE_IDENTIFIER.match(identifier):
        return {"phone": re.sub(r"[\s\-()]", "", identifier)}
    return {"username__iexact": identifier}


class AccountBackend(ModelBackend):
    def authenticate(self, request, username=None, password=None, **kwargs):
        lookup = identifier_lookup(username or kwargs.get("email") or kwargs.get("phone") or "")
        if lookup is None or password is None:
            return None

        matches = list(get_user_model().objects.filter(**lookup)[:2])
        if len(matches) != 1:
            # unknown or shared identifier
            get_user_model()().set_password(password)
            return None

        user = matches[0]
        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
