import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("catalog", "0001_initial"),
        ("customers", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("total_amount", models.PositiveIntegerField()),
                (
                    "payment_method",
                    models.CharField(
                        choices=[("pix", "PIX"), ("cartao", "Cartao de Credito"), ("dinheiro", "Dinheiro")],
                        max_length=16,
                    ),
                ),
                ("installments", models.PositiveIntegerField(default=1)),
                ("amount_received", models.PositiveIntegerField(blank=True, null=True)),
                ("change", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("completed", "Completed"), ("cancelled", "Cancelled")],
                        default="completed",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="sales",
                        to="customers.customer",
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["account", "created_at"], name="sale_account_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(check=models.Q(installments__gte=1), name="sale_installments_gte_one"),
                    models.CheckConstraint(
                        check=(
                            models.Q(amount_received__isnull=True, change__isnull=True)
                            | models.Q(amount_received__isnull=False, change__isnull=False)
                        ),
                        name="sale_cash_fields_together",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("product_name", models.CharField(max_length=255)),
                ("quantity", models.PositiveIntegerField()),
                ("unit_price", models.PositiveIntegerField()),
                ("total_price", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="catalog.product",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="sales.sale",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.CheckConstraint(check=models.Q(quantity__gte=1), name="saleitem_quantity_gte_one"),
                    models.CheckConstraint(
                        check=models.Q(total_price=models.F("quantity") * models.F("unit_price")),
                        name="saleitem_total_matches",
                    ),
                ],
            },
        ),
    ]
