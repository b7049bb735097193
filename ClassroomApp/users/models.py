from django.contrib.auth.models import AbstractUser
from django.db import models

from ClassroomApp.core.choices import UserRole

class User(AbstractUser):
    """Local user record, reconciled with the identity provider on every sign-in.

    ``role`` defaults to Student and is only ever changed by an Admin; identity sync
    owns ``email``, ``full_name`` and ``avatar_url``.
    """
    email = models.EmailField(unique=True)
    external_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    full_name = models.CharField(max_length=255, blank=True)
    avatar_url = models.URLField(max_length=1024, null=True, blank=True)
    role = models.CharField(max_length=16, choices=UserRole.choices, default=UserRole.STUDENT)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    def __str__(self) -> str:
        return f"{self.full_name or self.email} ({self.role})"
