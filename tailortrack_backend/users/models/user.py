"""
PATH: users/models/user.py

CUSTOM USER MODEL

Accounts:
- admin / staff: back office (orders, customers, payments, broadcasts)
- customer: self-service (own orders, own profile, notifications)

Identity:
- email is canonical (USERNAME_FIELD)
- username optional; a free variant of the email local-part when missing
- phone stored without separators (login and SMS lookups)
- login accepts email, username or phone (see users/auth_backends.py)
"""

from __future__ import annotations

import re
import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models

from permissions.roles import ROLE_ADMIN, ROLE_CHOICES, ROLE_CUSTOMER, STAFF_ROLES


# ---------------- USER MANAGER ----------------
class UserManager(BaseUserManager):
    def _free_username(self, email: str) -> str:
        base = re.sub(r"[^a-z0-9._-]", "", email.split("@")[0].lower()) or "user"
        taken = {
            name.lower()
            for name in self.model.objects.filter(username__istartswith=base).values_list("username", flat=True)
        }
        candidate, n = base, 1
        while candidate in taken:
            n += 1
            candidate = f"{base}{n}"
        return candidate

    def create_user(self, email=None, password=None, **extra_fields):
        """
        Email is required. Username defaults to a free variant of the email
        local-part; is_staff follows the role unless passed explicitly.
        """
        email = self.normalize_email((email or extra_fields.pop("email", "") or "").strip())
        if not email:
            raise ValueError("Users must have an email address")

        extra_fields["username"] = (extra_fields.get("username") or "").strip() or self._free_username(email)
        extra_fields["phone"] = re.sub(r"[\s\-()]", "", extra_fields.get("phone") or "")
        extra_fields.setdefault("role", ROLE_CUSTOMER)
        extra_fields.setdefault("is_staff", extra_fields["role"] in STAFF_ROLES)
        extra_fields.setdefault("is_active", True)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.full_clean(exclude=["password"])
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields.update(role=ROLE_ADMIN, is_staff=True, is_superuser=True, is_active=True)
        return self.create_user(email=email, password=password, **extra_fields)

    def customers(self):
        return self.filter(role=ROLE_CUSTOMER, is_active=True)


# ---------------- USER MODEL ----------------
class User(AbstractBaseUser, PermissionsMixin):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    username = models.CharField(max_length=150, unique=True, null=True, blank=True)
    email = models.EmailField(unique=True)

    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=20, blank=True, default="")

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_CUSTOMER)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["role"], name="users_user_role_idx"),
            models.Index(fields=["phone"], name="users_user_phone_idx"),
        ]

    def clean(self):
        if self.email:
            self.email = self.__class__.objects.normalize_email(self.email).strip()
        if self.username is not None:
            self.username = self.username.strip() or None

        if self.phone:
            self.phone = re.sub(r"[\s\-()]", "", self.phone)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or (self.username or self.email)

    @property
    def is_shop_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def __str__(self):
        ident = self.username or self.email
        return f"{ident} ({self.role})"
