import re

from django.core.exceptions import ValidationError
from django.db import models

CPF_RE = re.compile(r"^\d{11}$")


def normalize_cpf(value):
    return re.sub(r"\D+", "", str(value or ""))


def validate_cpf(value):
    if not CPF_RE.match(value or ""):
        raise ValidationError("O CPF deve conter exatamente 11 digitos.")


class Customer(models.Model):
    account = models.ForeignKey("accounts.User", on_delete=models.CASCADE, related_name="customers")
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=320)
    phone = models.CharField(max_length=20)
    cpf = models.CharField(max_length=11, unique=True, validators=[validate_cpf])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["account", "created_at"], name="customer_account_created_idx"),
            models.Index(fields=["name"], name="customer_name_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.cpf})"
