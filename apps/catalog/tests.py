from django.contrib.auth import get_user_model
from rest_framework.test import APITestCase

from apps.audit.models import AuditLog
from apps.catalog.models import Product

User = get_user_model()


class ProductApiTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="loja", password="loja123")
        self.other = User.objects.create_user(username="outra", password="outra123")
        self.foreign_product = Product.objects.create(account=self.other, name="Cha", price=300)

    def auth_as_owner(self):
        response = self.client.post(
            "/api/v1/auth/token/",
            {"username": "loja", "password": "loja123"},
            format="json",
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")

    def test_product_create_update_delete_are_audited(self):
        self.auth_as_owner()
        created = self.client.post(
            "/api/v1/products/",
            {"name": "Cafe", "description": "Expresso", "price": 500, "image_url": "/img/cafe.png"},
            format="json",
        )
        self.assertEqual(created.status_code, 201)
        product_id = created.data["id"]
        self.assertEqual(created.data["price"], 500)
        self.assertEqual(created.data["price_display"], "5.00")

        updated = self.client.patch(f"/api/v1/products/{product_id}/", {"price": 650}, format="json")
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.data["price"], 650)

        deleted = self.client.delete(f"/api/v1/products/{product_id}/")
        self.assertEqual(deleted.status_code, 204)

        self.assertTrue(AuditLog.objects.filter(action="product.create", entity_id=str(product_id)).exists())
        update_log = AuditLog.objects.get(action="product.update", entity_id=str(product_id))
        self.assertEqual(update_log.payload["before"]["price"], 500)
        self.assertEqual(update_log.payload["after"]["price"], 650)
        self.assertTrue(AuditLog.objects.filter(action="product.delete", entity_id=str(product_id)).exists())

    def test_description_and_image_are_optional(self):
        self.auth_as_owner()
        response = self.client.post("/api/v1/products/", {"name": "Bolo", "price": 1200}, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["description"], "")
        self.assertEqual(response.data["image_url"], "")

    def test_price_must_be_non_negative_integer_centavos(self):
        self.auth_as_owner()
        for bad_price in (-1, 12.5, "12.50", True, 2**31):
            response = self.client.post("/api/v1/products/", {"name": "Bolo", "price": bad_price}, format="json")
            self.assertEqual(response.status_code, 400, bad_price)
            self.assertIn("price", response.data["fields"])
        self.assertFalse(Product.objects.filter(account=self.user).exists())

    def test_products_are_scoped_to_account(self):
        self.auth_as_owner()
        Product.objects.create(account=self.user, name="Cafe", price=500)

        listing = self.client.get("/api/v1/products/")
        self.assertEqual(listing.status_code, 200)
        self.assertEqual(listing.data["count"], 1)
        self.assertEqual(listing.data["results"][0]["name"], "Cafe")

        foreign_url = f"/api/v1/products/{self.foreign_product.id}/"
        self.assertEqual(self.client.get(foreign_url).status_code, 404)
        self.assertEqual(self.client.patch(foreign_url, {"price": 1}, format="json").status_code, 404)
        self.assertEqual(self.client.delete(foreign_url).status_code, 404)
        self.foreign_product.refresh_from_db()
        self.assertEqual(self.foreign_product.price, 300)

    def test_search_matches_name_or_description(self):
        self.auth_as_owner()
        Product.objects.create(account=self.user, name="Cafe", description="Torrado", price=500)
        Product.objects.create(account=self.user, name="Bolo", description="Chocolate", price=1200)

        response = self.client.get("/api/v1/products/?q=choc")
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["name"], "Bolo")
