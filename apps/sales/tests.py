from datetime import datetime, timezone as dt_timezone
from io import BytesIO
from types import SimpleNamespace
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError, OperationalError
from django.test import SimpleTestCase, TestCase
from rest_framework.test import APITestCase

from apps.audit.models import AuditLog
from apps.catalog.models import Product
from apps.common.exceptions import NotFoundError, ValidationError
from apps.customers.models import Customer
from apps.sales.cart import Cart
from apps.sales.models import PaymentMethod, Sale, SaleItem, SaleStatus
from apps.sales.receipts import MARGIN, _ReceiptPage, receipt_filename, render_receipt, truncate_name
from apps.sales.services import get_sale_detail, list_sales, record_sale

User = get_user_model()


def make_product(product_id, name, price):
    return SimpleNamespace(id=product_id, name=name, price=price)


class CartTests(SimpleTestCase):
    def setUp(self):
        self.coffee = make_product(1, "Coffee", 500)
        self.cake = make_product(2, "Cake", 1200)

    def test_add_item_inserts_then_increments(self):
        cart = Cart()
        cart.add_item(self.coffee)
        cart.add_item(self.cake)
        cart.add_item(self.coffee)

        self.assertEqual([line.product_id for line in cart], [1, 2])
        self.assertEqual(cart.get(1).quantity, 2)
        self.assertEqual(cart.total(), 2200)

    def test_price_is_captured_when_added(self):
        cart = Cart()
        cart.add_item(self.coffee)
        self.coffee.price = 900
        cart.add_item(self.coffee)
        self.assertEqual(cart.get(1).unit_price, 500)
        self.assertEqual(cart.total(), 1000)

    def test_set_quantity_replaces_or_removes(self):
        cart = Cart()
        cart.add_item(self.coffee)
        cart.add_item(self.cake)

        cart.set_quantity(1, 5)
        self.assertEqual(cart.get(1).quantity, 5)
        cart.set_quantity(2, 0)
        self.assertNotIn(2, cart)
        cart.set_quantity(1, -3)
        self.assertTrue(cart.is_empty)
        self.assertEqual(cart.total(), 0)

    def test_remove_item_missing_is_noop(self):
        cart = Cart()
        cart.add_item(self.coffee)
        cart.remove_item(42)
        cart.remove_item(1)
        cart.remove_item(1)
        self.assertEqual(len(cart), 0)

    def test_total_never_drifts_over_many_operations(self):
        cart = Cart()
        products = [make_product(i, f"P{i}", price) for i, price in enumerate((1, 10, 333, 999, 1234), start=1)]
        for step in range(500):
            product = products[step % len(products)]
            if step % 7 == 0:
                cart.remove_item(product.id)
            elif step % 5 == 0:
                cart.set_quantity(product.id, step % 4)
            else:
                cart.add_item(product)
            expected = sum(line.unit_price * line.quantity for line in cart)
            self.assertEqual(cart.total(), expected)
            self.assertIsInstance(cart.total(), int)

    def test_change_and_sale_items(self):
        cart = Cart()
        cart.add_item(self.coffee)
        cart.add_item(self.coffee)
        cart.add_item(self.cake)
        self.assertEqual(cart.change_for(2500), 300)
        self.assertEqual(
            cart.as_sale_items(),
            [
                {"product_id": 1, "quantity": 2, "unit_price": 500, "total_price": 1000},
                {"product_id": 2, "quantity": 1, "unit_price": 1200, "total_price": 1200},
            ],
        )
        cart.clear()
        self.assertTrue(cart.is_empty)


class ReceiptTests(SimpleTestCase):
    def sale(self, **overrides):
        data = {
            "id": 17,
            "total_amount": 2200,
            "payment_method": "dinheiro",
            "installments": 1,
            "amount_received": 2500,
            "change": 300,
            "created_at": datetime(2026, 3, 14, 15, 0, tzinfo=dt_timezone.utc),
        }
        data.update(overrides)
        return data

    def items(self):
        return [
            {"product_name": "Coffee", "quantity": 2, "unit_price": 500, "total_price": 1000},
            {"name": "Cake with a very long descriptive name", "quantity": 1, "unit_price": 1200, "total_price": 1200},
        ]

    def customer(self):
        return {"name": "Maria Silva", "cpf": "12345678901", "email": "maria@example.com", "phone": "11988887777"}

    def test_cash_receipt_layout(self):
        pdf = render_receipt(self.sale(), self.customer(), self.items())
        self.assertTrue(pdf.startswith(b"%PDF"))
        for text in (
            b"COMPROVANTE DE VENDA",
            b"Venda #17",
            b"Data: 14/03/2026",
            b"CPF: 12345678901",
            b"Coffee",
            b"Cake with a very long descr...",
            b"R$ 22.00",
            b"Forma de Pagamento: Dinheiro",
            b"Valor Recebido: R$ 25.00",
            b"Troco: R$ 3.00",
            b"Obrigado pela compra! Volte sempre.",
        ):
            self.assertIn(text, pdf)
        self.assertNotIn(b"Parcelas:", pdf)

    def test_card_receipt_shows_installments_without_cash_lines(self):
        sale = self.sale(payment_method="cartao", installments=3, amount_received=None, change=None)
        pdf = render_receipt(sale, self.customer(), self.items())
        self.assertIn(b"Forma de Pagamento: Cartao de Credito", pdf)
        self.assertIn(b"Parcelas: 3x de R$ 7.33", pdf)
        self.assertNotIn(b"Troco", pdf)
        self.assertNotIn(b"Valor Recebido", pdf)

    def test_missing_customer_renders_blank_block(self):
        pdf = render_receipt(self.sale(payment_method="pix", amount_received=None, change=None), None, self.items())
        self.assertIn(b"Forma de Pagamento: PIX", pdf)
        self.assertIn(b"Nome: ", pdf)

    def test_rendering_is_deterministic(self):
        first = render_receipt(self.sale(), self.customer(), self.items())
        second = render_receipt(self.sale(), self.customer(), self.items())
        self.assertEqual(first, second)

    def test_malformed_input_fails_fast(self):
        with self.assertRaises(ValidationError):
            render_receipt(self.sale(total_amount=None), self.customer(), self.items())
        with self.assertRaises(ValidationError):
            render_receipt(self.sale(change=None), self.customer(), self.items())
        with self.assertRaises(ValidationError):
            render_receipt(self.sale(), self.customer(), [])
        with self.assertRaises(ValidationError):
            render_receipt(self.sale(), self.customer(), [{"quantity": 1, "unit_price": 1, "total_price": 1}])

    def test_long_receipt_repeats_table_heading_on_next_page(self):
        items = [
            {"product_name": f"Item {n}", "quantity": 1, "unit_price": 100, "total_price": 100} for n in range(45)
        ]
        pdf = render_receipt(self.sale(total_amount=4500, amount_received=5000, change=500), self.customer(), items)
        self.assertGreaterEqual(pdf.count(b"Produto"), 2)
        self.assertIn(b"Item 44", pdf)
        self.assertIn(b"Troco: R$ 5.00", pdf)

    def test_page_break_keeps_current_font(self):
        page = _ReceiptPage(BytesIO(), 1)
        page.font("normal", 9)
        page.advance(300)
        self.assertEqual(page.cursor, MARGIN)
        self.assertEqual((page.canvas._fontname, page.canvas._fontsize), ("Helvetica", 9))

    def test_name_truncation_and_filename(self):
        self.assertEqual(truncate_name("x" * 30), "x" * 30)
        self.assertEqual(truncate_name("x" * 31), "x" * 27 + "...")
        self.assertEqual(receipt_filename(17), "venda-17.pdf")


class SaleFixturesMixin:
    def create_fixtures(self):
        self.user = User.objects.create_user(username="caixa", password="caixa123")
        self.other = User.objects.create_user(username="outra", password="outra123")
        self.customer = Customer.objects.create(
            account=self.user,
            name="Maria Silva",
            email="maria@example.com",
            phone="11988887777",
            cpf="12345678901",
        )
        self.coffee = Product.objects.create(account=self.user, name="Coffee", price=500)
        self.cake = Product.objects.create(account=self.user, name="Cake", price=1200)
        self.foreign_customer = Customer.objects.create(
            account=self.other,
            name="Joao",
            email="joao@example.com",
            phone="11900000000",
            cpf="10987654321",
        )
        self.foreign_product = Product.objects.create(account=self.other, name="Tea", price=300)

    def cart_items(self):
        return [
            {"product_id": self.coffee.id, "quantity": 2, "unit_price": 500, "total_price": 1000},
            {"product_id": self.cake.id, "quantity": 1, "unit_price": 1200, "total_price": 1200},
        ]


class RecordSaleServiceTests(SaleFixturesMixin, TestCase):
    def setUp(self):
        self.create_fixtures()

    def test_sale_and_items_are_written_together(self):
        sale = record_sale(
            account=self.user,
            customer_id=self.customer.id,
            items=self.cart_items(),
            payment_method=PaymentMethod.PIX,
        )
        self.assertIsNotNone(sale.id)
        self.assertEqual(Sale.objects.get(id=sale.id).total_amount, 2200)
        self.assertEqual(SaleItem.objects.filter(sale=sale).count(), 2)

    def test_failure_after_header_leaves_no_sale_visible(self):
        with mock.patch.object(SaleItem.objects, "bulk_create", side_effect=DatabaseError("crash")):
            with self.assertRaises(DatabaseError):
                record_sale(
                    account=self.user,
                    customer_id=self.customer.id,
                    items=self.cart_items(),
                    payment_method=PaymentMethod.CASH,
                    amount_tendered=2500,
                )
        self.assertEqual(Sale.objects.count(), 0)
        self.assertEqual(SaleItem.objects.count(), 0)
        self.assertFalse(AuditLog.objects.filter(action="sale.create").exists())
        self.assertEqual(list_sales(self.user), [])

    def test_failure_while_auditing_rolls_back_sale(self):
        with mock.patch("apps.sales.services.record_audit", side_effect=DatabaseError("crash")):
            with self.assertRaises(DatabaseError):
                record_sale(
                    account=self.user,
                    customer_id=self.customer.id,
                    items=self.cart_items(),
                    payment_method=PaymentMethod.PIX,
                )
        self.assertEqual(Sale.objects.count(), 0)
        self.assertEqual(SaleItem.objects.count(), 0)

    def test_validation_runs_before_any_write(self):
        cases = [
            ({"items": []}, ValidationError),
            ({"items": [{"product_id": self.coffee.id, "quantity": 0, "unit_price": 500}]}, ValidationError),
            ({"items": [{"product_id": self.coffee.id, "quantity": 1, "unit_price": -1}]}, ValidationError),
            ({"items": [{"product_id": self.coffee.id, "quantity": 1.5, "unit_price": 500}]}, ValidationError),
            ({"total_amount": 2100}, ValidationError),
            ({"installments": 0}, ValidationError),
            ({"payment_method": "boleto"}, ValidationError),
            ({"customer_id": 999999}, NotFoundError),
            ({"customer_id": None}, NotFoundError),
        ]
        for overrides, error in cases:
            kwargs = {
                "account": self.user,
                "customer_id": self.customer.id,
                "items": self.cart_items(),
                "payment_method": PaymentMethod.PIX,
            }
            kwargs.update(overrides)
            with self.subTest(overrides=overrides):
                with self.assertRaises(error):
                    record_sale(**kwargs)
        self.assertEqual(Sale.objects.count(), 0)

    def test_cross_account_references_are_not_found(self):
        with self.assertRaises(NotFoundError):
            record_sale(
                account=self.user,
                customer_id=self.foreign_customer.id,
                items=self.cart_items(),
                payment_method=PaymentMethod.PIX,
            )
        with self.assertRaises(NotFoundError):
            record_sale(
                account=self.user,
                customer_id=self.customer.id,
                items=[{"product_id": self.foreign_product.id, "quantity": 1, "unit_price": 300}],
                payment_method=PaymentMethod.PIX,
            )
        self.assertEqual(Sale.objects.count(), 0)

    def test_totals_beyond_storage_range_are_rejected(self):
        with self.assertRaises(ValidationError) as line_error:
            record_sale(
                account=self.user,
                customer_id=self.customer.id,
                items=[{"product_id": self.coffee.id, "quantity": 100000, "unit_price": 100000}],
                payment_method=PaymentMethod.PIX,
            )
        self.assertIn("total_price", line_error.exception.detail)

        with self.assertRaises(ValidationError) as sale_error:
            record_sale(
                account=self.user,
                customer_id=self.customer.id,
                items=[
                    {"product_id": self.coffee.id, "quantity": 15000, "unit_price": 100000},
                    {"product_id": self.cake.id, "quantity": 15000, "unit_price": 100000},
                ],
                payment_method=PaymentMethod.PIX,
            )
        self.assertIn("total_amount", sale_error.exception.detail)
        self.assertEqual(Sale.objects.count(), 0)

    def test_get_sale_detail_hides_foreign_sales(self):
        sale = record_sale(
            account=self.user,
            customer_id=self.customer.id,
            items=self.cart_items(),
            payment_method=PaymentMethod.PIX,
        )
        self.assertEqual(get_sale_detail(self.user, sale.id), sale)
        with self.assertRaises(NotFoundError):
            get_sale_detail(self.other, sale.id)
        with self.assertRaises(NotFoundError):
            get_sale_detail(self.user, "not-a-number")


class SalesApiTests(SaleFixturesMixin, APITestCase):
    def setUp(self):
        self.create_fixtures()

    def auth_as(self, username, password):
        token = self.client.post(
            "/api/v1/auth/token/",
            {"username": username, "password": password},
            format="json",
        ).data["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    def sale_payload(self, **overrides):
        payload = {
            "customer_id": self.customer.id,
            "total_amount": 2200,
            "payment_method": "pix",
            "installments": 1,
            "items": self.cart_items(),
        }
        payload.update(overrides)
        return payload

    def post_sale(self, **overrides):
        return self.client.post("/api/v1/sales/", self.sale_payload(**overrides), format="json")

    def test_cash_sale_derives_change(self):
        self.auth_as("caixa", "caixa123")
        response = self.post_sale(payment_method="dinheiro", amount_received=2500, change=300)
        self.assertEqual(response.status_code, 201)
        self.assertIn("sale_id", response.data)

        sale = Sale.objects.get(id=response.data["sale_id"])
        self.assertEqual(sale.account, self.user)
        self.assertEqual(sale.total_amount, 2200)
        self.assertEqual(sale.amount_received, 2500)
        self.assertEqual(sale.change, 300)
        self.assertEqual(sale.status, SaleStatus.COMPLETED)
        self.assertEqual(sale.installments, 1)
        self.assertEqual(response.data["change"], 300)
        self.assertEqual(response.data["customer_name"], "Maria Silva")

        items = list(sale.items.all())
        self.assertEqual([item.product_name for item in items], ["Coffee", "Cake"])
        self.assertEqual([item.total_price for item in items], [1000, 1200])
        self.assertTrue(AuditLog.objects.filter(action="sale.create", entity_id=str(sale.id)).exists())

    def test_cash_change_is_derived_when_not_supplied(self):
        self.auth_as("caixa", "caixa123")
        response = self.post_sale(payment_method="dinheiro", amount_received=2200)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(Sale.objects.get(id=response.data["sale_id"]).change, 0)

    def test_cash_sale_rejects_insufficient_or_missing_amount(self):
        self.auth_as("caixa", "caixa123")
        short = self.post_sale(payment_method="dinheiro", amount_received=2199)
        self.assertEqual(short.status_code, 400)
        self.assertIn("amount_received", short.data["fields"])

        missing = self.post_sale(payment_method="dinheiro")
        self.assertEqual(missing.status_code, 400)
        self.assertIn("amount_received", missing.data["fields"])
        self.assertEqual(Sale.objects.count(), 0)

    def test_cash_sale_rejects_inconsistent_change(self):
        self.auth_as("caixa", "caixa123")
        response = self.post_sale(payment_method="dinheiro", amount_received=2500, change=500)
        self.assertEqual(response.status_code, 400)
        self.assertIn("change", response.data["fields"])
        self.assertEqual(Sale.objects.count(), 0)

    def test_card_sale_keeps_installments_and_no_cash_fields(self):
        self.auth_as("caixa", "caixa123")
        response = self.post_sale(payment_method="cartao", installments=3, amount_received=5000, change=2800)
        self.assertEqual(response.status_code, 201)

        sale = Sale.objects.get(id=response.data["sale_id"])
        self.assertEqual(sale.installments, 3)
        self.assertIsNone(sale.amount_received)
        self.assertIsNone(sale.change)

        detail = self.client.get(f"/api/v1/sales/{sale.id}/")
        self.assertEqual(detail.status_code, 200)
        self.assertEqual(detail.data["installments"], 3)
        self.assertEqual(detail.data["installment_amount"], 733)
        self.assertEqual(detail.data["total_amount"], 2200)

    def test_installments_forced_to_one_for_non_card(self):
        self.auth_as("caixa", "caixa123")
        response = self.post_sale(payment_method="pix", installments=6)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(Sale.objects.get(id=response.data["sale_id"]).installments, 1)

    def test_rejects_total_mismatch(self):
        self.auth_as("caixa", "caixa123")
        response = self.post_sale(total_amount=2000)
        self.assertEqual(response.status_code, 400)
        self.assertIn("total_amount", response.data["fields"])
        self.assertEqual(Sale.objects.count(), 0)

    def test_rejects_item_total_mismatch(self):
        self.auth_as("caixa", "caixa123")
        items = self.cart_items()
        items[0]["total_price"] = 999
        payload = self.sale_payload(items=items)
        payload.pop("total_amount")
        response = self.client.post("/api/v1/sales/", payload, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("total_price", response.data["fields"])
        self.assertEqual(Sale.objects.count(), 0)

    def test_total_amount_is_optional_and_recomputed(self):
        self.auth_as("caixa", "caixa123")
        payload = self.sale_payload()
        payload.pop("total_amount")
        response = self.client.post("/api/v1/sales/", payload, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["total_amount"], 2200)

    def test_rejects_malformed_items(self):
        self.auth_as("caixa", "caixa123")
        empty = self.post_sale(items=[])
        self.assertEqual(empty.status_code, 400)
        self.assertIn("items", empty.data["fields"])

        zero_qty = self.post_sale(items=[{"product_id": self.coffee.id, "quantity": 0, "unit_price": 500}])
        self.assertEqual(zero_qty.status_code, 400)
        self.assertIn("items", zero_qty.data["fields"])

        float_price = self.post_sale(items=[{"product_id": self.coffee.id, "quantity": 1, "unit_price": 5.0}])
        self.assertEqual(float_price.status_code, 400)

        bad_method = self.post_sale(payment_method="boleto")
        self.assertEqual(bad_method.status_code, 400)
        self.assertIn("payment_method", bad_method.data["fields"])
        self.assertEqual(Sale.objects.count(), 0)

    def test_rejects_oversized_quantity(self):
        self.auth_as("caixa", "caixa123")
        oversized = self.sale_payload(items=[{"product_id": self.coffee.id, "quantity": 10**12, "unit_price": 10**8}])
        oversized.pop("total_amount")
        response = self.client.post("/api/v1/sales/", oversized, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("items", response.data["fields"])

        payload = self.sale_payload(items=[{"product_id": self.coffee.id, "quantity": 100000, "unit_price": 100000}])
        payload.pop("total_amount")
        overflow = self.client.post("/api/v1/sales/", payload, format="json")
        self.assertEqual(overflow.status_code, 400)
        self.assertIn("total_price", overflow.data["fields"])
        self.assertEqual(Sale.objects.count(), 0)

    def test_rejects_foreign_customer_and_product(self):
        self.auth_as("caixa", "caixa123")
        foreign_customer = self.post_sale(customer_id=self.foreign_customer.id)
        self.assertEqual(foreign_customer.status_code, 404)
        self.assertIn("customer_id", foreign_customer.data["fields"])

        foreign_product = self.post_sale(
            total_amount=300,
            items=[{"product_id": self.foreign_product.id, "quantity": 1, "unit_price": 300}],
        )
        self.assertEqual(foreign_product.status_code, 404)
        self.assertIn("product_id", foreign_product.data["fields"])
        self.assertEqual(Sale.objects.count(), 0)

    def test_history_is_scoped_to_account(self):
        own = record_sale(
            account=self.user,
            customer_id=self.customer.id,
            items=self.cart_items(),
            payment_method=PaymentMethod.PIX,
        )
        foreign = record_sale(
            account=self.other,
            customer_id=self.foreign_customer.id,
            items=[{"product_id": self.foreign_product.id, "quantity": 1, "unit_price": 300}],
            payment_method=PaymentMethod.PIX,
        )

        self.auth_as("caixa", "caixa123")
        listing = self.client.get("/api/v1/sales/")
        self.assertEqual(listing.status_code, 200)
        self.assertEqual([row["id"] for row in listing.data["results"]], [own.id])

        self.assertEqual(self.client.get(f"/api/v1/sales/{foreign.id}/").status_code, 404)
        self.assertEqual(self.client.get(f"/api/v1/sales/{foreign.id}/receipt/").status_code, 404)

    def test_history_is_newest_first_with_customer_fields(self):
        self.auth_as("caixa", "caixa123")
        first = self.post_sale().data["sale_id"]
        second = self.post_sale(payment_method="cartao", installments=2).data["sale_id"]

        listing = self.client.get("/api/v1/sales/")
        results = listing.data["results"]
        self.assertEqual([row["id"] for row in results], [second, first])
        self.assertEqual(results[0]["customer_cpf"], "12345678901")
        self.assertEqual(results[0]["payment_method"], "cartao")

    def test_deleted_customer_does_not_break_history(self):
        self.auth_as("caixa", "caixa123")
        sale_id = self.post_sale(payment_method="dinheiro", amount_received=3000).data["sale_id"]
        self.assertEqual(self.client.delete(f"/api/v1/customers/{self.customer.id}/").status_code, 204)

        listing = self.client.get("/api/v1/sales/")
        self.assertEqual(listing.status_code, 200)
        row = listing.data["results"][0]
        self.assertEqual(row["customer_id"], self.customer.id)
        self.assertIsNone(row["customer_name"])

        detail = self.client.get(f"/api/v1/sales/{sale_id}/")
        self.assertEqual(detail.status_code, 200)
        self.assertIsNone(detail.data["customer_email"])
        self.assertEqual(len(detail.data["items"]), 2)

        receipt = self.client.get(f"/api/v1/sales/{sale_id}/receipt/")
        self.assertEqual(receipt.status_code, 200)

    def test_price_edit_does_not_rewrite_recorded_items(self):
        self.auth_as("caixa", "caixa123")
        sale_id = self.post_sale().data["sale_id"]
        self.client.patch(f"/api/v1/products/{self.coffee.id}/", {"price": 900, "name": "Espresso"}, format="json")

        detail = self.client.get(f"/api/v1/sales/{sale_id}/")
        coffee_line = detail.data["items"][0]
        self.assertEqual(coffee_line["unit_price"], 500)
        self.assertEqual(coffee_line["product_name"], "Coffee")
        self.assertEqual(detail.data["total_amount"], 2200)

    def test_detail_lists_items_in_insertion_order(self):
        self.auth_as("caixa", "caixa123")
        sale_id = self.post_sale().data["sale_id"]
        detail = self.client.get(f"/api/v1/sales/{sale_id}/")
        self.assertEqual([item["product_id"] for item in detail.data["items"]], [self.coffee.id, self.cake.id])
        self.assertEqual(self.client.get("/api/v1/sales/999999/").status_code, 404)

    def test_receipt_download(self):
        self.auth_as("caixa", "caixa123")
        sale_id = self.post_sale(payment_method="dinheiro", amount_received=2500).data["sale_id"]

        response = self.client.get(f"/api/v1/sales/{sale_id}/receipt/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/pdf")
        self.assertIn(f'filename="venda-{sale_id}.pdf"', response["Content-Disposition"])
        self.assertTrue(response.content.startswith(b"%PDF"))
        self.assertIn(b"Troco: R$ 3.00", response.content)

    def test_quote_computes_checkout_values(self):
        self.auth_as("caixa", "caixa123")
        response = self.client.post(
            "/api/v1/sales/quote/",
            {
                "items": [
                    {"product_id": self.coffee.id, "quantity": 2},
                    {"product_id": self.cake.id, "quantity": 1},
                ],
                "payment_method": "dinheiro",
                "amount_received": 2500,
            },
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total_amount"], 2200)
        self.assertEqual(response.data["total_display"], "22.00")
        self.assertEqual(response.data["change"], 300)
        self.assertEqual([line["total_price"] for line in response.data["items"]], [1000, 1200])
        self.assertEqual(Sale.objects.count(), 0)

        card = self.client.post(
            "/api/v1/sales/quote/",
            {"items": [{"product_id": self.coffee.id, "quantity": 2}, {"product_id": self.cake.id}], "payment_method": "cartao", "installments": 3},
            format="json",
        )
        self.assertEqual(card.data["installment_amount"], 733)
        self.assertIsNone(card.data["change"])

        foreign = self.client.post(
            "/api/v1/sales/quote/",
            {"items": [{"product_id": self.foreign_product.id, "quantity": 1}]},
            format="json",
        )
        self.assertEqual(foreign.status_code, 404)

    def test_quote_rejects_non_positive_quantity(self):
        self.auth_as("caixa", "caixa123")
        for quantity in (0, -2):
            response = self.client.post(
                "/api/v1/sales/quote/",
                {"items": [{"product_id": self.coffee.id, "quantity": quantity}]},
                format="json",
            )
            self.assertEqual(response.status_code, 400, quantity)
            self.assertIn("items", response.data["fields"])

    def test_sale_write_fails_loudly_when_storage_is_down(self):
        self.auth_as("caixa", "caixa123")
        with mock.patch.object(Sale.objects, "create", side_effect=OperationalError("down")):
            response = self.post_sale()
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.data["code"], "storage_unavailable")
        self.assertEqual(Sale.objects.count(), 0)

    def test_listing_degrades_when_storage_is_down(self):
        self.auth_as("caixa", "caixa123")
        self.post_sale()
        with mock.patch("apps.sales.services.sales_for_account", side_effect=OperationalError("down")):
            listing = self.client.get("/api/v1/sales/")
            detail = self.client.get("/api/v1/sales/1/")
        self.assertEqual(listing.status_code, 200)
        self.assertEqual(listing.data["count"], 0)
        self.assertEqual(detail.status_code, 503)
        self.assertEqual(detail.data["code"], "storage_unavailable")
