"""
PATH: users/models/user.py

CUSTOM USER MODEL

- Email is the canonical login identity.
- role drives back-office access (see users/permissions.py).
- Guests never get a User row; orders keep user nullable.
"""

from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models

ROLE_ADMIN = "admin"
ROLE_PRODUCTION = "production"
ROLE_SUPPORT = "support"
ROLE_CUSTOMER = "customer"

STAFF_ROLES = {ROLE_ADMIN, ROLE_PRODUCTION, ROLE_SUPPORT}


# ---------------- USER MANAGER ----------------
class UserManager(BaseUserManager):
    def create_user(self, email=None, password=None, **extra_fields):
        email = (email or "").strip()
        if not email:
            raise ValueError("An email address is required")

        email = self.normalize_email(email)
        extra_fields.setdefault("is_active", True)

        role = extra_fields.get("role") or ROLE_CUSTOMER
        extra_fields["role"] = role
        extra_fields.setdefault("is_staff", role in STAFF_ROLES)

        user = self.model(email=email, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.full_clean(exclude=["password"])
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("Superuser must have an email")
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields.setdefault("role", ROLE_ADMIN)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True")

        return self.create_user(email=email, password=password, **extra_fields)


# ---------------- USER MODEL ----------------
class User(AbstractBaseUser, PermissionsMixin):
    ROLE_CHOICES = [
        (ROLE_ADMIN, "Admin"),
        (ROLE_PRODUCTION, "Production"),
        (ROLE_SUPPORT, "Support"),
        (ROLE_CUSTOMER, "Customer"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    email = models.EmailField(unique=True)

    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=40, blank=True, default="")

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

    def clean(self):
        if self.email:
            self.email = self.__class__.objects.normalize_email(self.email).strip()
        if not self.email:
            raise ValidationError("User must have an email")

    @property
    def is_shop_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def __str__(self):
        return f"{self.email} ({self.role})"
