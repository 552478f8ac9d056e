from django.contrib.auth.models import AbstractUser
from django.db import models


class UserRole(models.TextChoices):
    USER = "user", "User"
    ADMIN = "admin", "Admin"


class User(AbstractUser):
    """Login identity. Its primary key scopes every customer, product and sale row."""

    role = models.CharField(max_length=20, choices=UserRole.choices, default=UserRole.USER)
    last_signed_in = models.DateTimeField(null=True, blank=True)
