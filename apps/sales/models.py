from django.db import models


class PaymentMethod(models.TextChoices):
    PIX = "pix", "PIX"
    CARD = "cartao", "Cartao de Credito"
    CASH = "dinheiro", "Dinheiro"


class SaleStatus(models.TextChoices):
    # Every sale is recorded as COMPLETED; PENDING and CANCELLED are reserved.
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class Sale(models.Model):
    account = models.ForeignKey("accounts.User", on_delete=models.CASCADE, related_name="sales")
    # Weak reference: deleting the customer keeps the stored id on past sales.
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        related_name="sales",
    )
    total_amount = models.PositiveIntegerField()
    payment_method = models.CharField(max_length=16, choices=PaymentMethod.choices)
    installments = models.PositiveIntegerField(default=1)
    amount_received = models.PositiveIntegerField(null=True, blank=True)
    change = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(max_length=16, choices=SaleStatus.choices, default=SaleStatus.COMPLETED)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["account", "created_at"], name="sale_account_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(check=models.Q(installments__gte=1), name="sale_installments_gte_one"),
            models.CheckConstraint(
                check=(
                    models.Q(amount_received__isnull=True, change__isnull=True)
                    | models.Q(amount_received__isnull=False, change__isnull=False)
                ),
                name="sale_cash_fields_together",
            ),
        ]

    def __str__(self):
        return f"Venda #{self.pk}"


class SaleItem(models.Model):
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="+",
    )
    product_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    unit_price = models.PositiveIntegerField()
    total_price = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(check=models.Q(quantity__gte=1), name="saleitem_quantity_gte_one"),
            models.CheckConstraint(
                check=models.Q(total_price=models.F("quantity") * models.F("unit_price")),
                name="saleitem_total_matches",
            ),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.product_name}"
