from django.db import models


class Product(models.Model):
    account = models.ForeignKey("accounts.User", on_delete=models.CASCADE, related_name="products")
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")
    price = models.PositiveIntegerField(help_text="Preco em centavos")
    image_url = models.CharField(max_length=500, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["account", "created_at"], name="product_account_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(check=models.Q(price__gte=0), name="product_price_gte_zero"),
        ]

    def __str__(self):
        return self.name
