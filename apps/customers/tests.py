from unittest import mock

from django.contrib.auth import get_user_model
from django.db import OperationalError
from rest_framework.test import APITestCase

from apps.audit.models import AuditLog
from apps.customers.models import Customer
from apps.customers.views import CustomerViewSet

User = get_user_model()


class CustomerApiTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="loja", password="loja123")
        self.other = User.objects.create_user(username="outra", password="outra123")
        self.foreign_customer = Customer.objects.create(
            account=self.other,
            name="Cliente de Outra Loja",
            email="outra@example.com",
            phone="11999990000",
            cpf="99988877766",
        )

    def auth_as(self, username, password):
        token = self.client.post(
            "/api/v1/auth/token/",
            {"username": username, "password": password},
            format="json",
        ).data["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    def customer_payload(self, **overrides):
        payload = {
            "name": "Maria Silva",
            "email": "maria@example.com",
            "phone": "11988887777",
            "cpf": "12345678901",
        }
        payload.update(overrides)
        return payload

    def test_customer_create_update_delete_are_audited(self):
        self.auth_as("loja", "loja123")
        created = self.client.post("/api/v1/customers/", self.customer_payload(), format="json")
        self.assertEqual(created.status_code, 201)
        customer_id = created.data["id"]
        self.assertEqual(Customer.objects.get(id=customer_id).account, self.user)

        updated = self.client.patch(f"/api/v1/customers/{customer_id}/", {"phone": "11977776666"}, format="json")
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.data["phone"], "11977776666")
        self.assertEqual(updated.data["cpf"], "12345678901")

        deleted = self.client.delete(f"/api/v1/customers/{customer_id}/")
        self.assertEqual(deleted.status_code, 204)
        self.assertFalse(Customer.objects.filter(id=customer_id).exists())

        self.assertTrue(AuditLog.objects.filter(action="customer.create", entity_id=str(customer_id)).exists())
        update_log = AuditLog.objects.get(action="customer.update", entity_id=str(customer_id))
        self.assertEqual(update_log.payload["before"]["phone"], "11988887777")
        self.assertEqual(update_log.payload["after"]["phone"], "11977776666")
        self.assertTrue(AuditLog.objects.filter(action="customer.delete", entity_id=str(customer_id)).exists())

    def test_duplicate_cpf_is_rejected(self):
        self.auth_as("loja", "loja123")
        first = self.client.post("/api/v1/customers/", self.customer_payload(), format="json")
        self.assertEqual(first.status_code, 201)

        duplicate = self.client.post(
            "/api/v1/customers/",
            self.customer_payload(name="Joao", email="joao@example.com"),
            format="json",
        )
        self.assertEqual(duplicate.status_code, 400)
        self.assertEqual(duplicate.data["code"], "invalid")
        self.assertIn("cpf", duplicate.data["fields"])
        self.assertEqual(Customer.objects.filter(account=self.user).count(), 1)

    def test_cpf_must_have_eleven_digits(self):
        self.auth_as("loja", "loja123")
        short = self.client.post("/api/v1/customers/", self.customer_payload(cpf="1234567890"), format="json")
        self.assertEqual(short.status_code, 400)
        self.assertIn("cpf", short.data["fields"])

        formatted = self.client.post("/api/v1/customers/", self.customer_payload(cpf="123.456.789-01"), format="json")
        self.assertEqual(formatted.status_code, 201)
        self.assertEqual(formatted.data["cpf"], "12345678901")

    def test_required_fields_and_email_format(self):
        self.auth_as("loja", "loja123")
        response = self.client.post(
            "/api/v1/customers/",
            self.customer_payload(name="  ", email="not-an-email"),
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("name", response.data["fields"])
        self.assertIn("email", response.data["fields"])

    def test_list_and_lookup_are_scoped_to_account(self):
        self.auth_as("loja", "loja123")
        self.client.post("/api/v1/customers/", self.customer_payload(), format="json")

        listing = self.client.get("/api/v1/customers/")
        self.assertEqual(listing.status_code, 200)
        self.assertEqual(listing.data["count"], 1)
        self.assertEqual(listing.data["results"][0]["name"], "Maria Silva")

        foreign_url = f"/api/v1/customers/{self.foreign_customer.id}/"
        self.assertEqual(self.client.get(foreign_url).status_code, 404)
        self.assertEqual(self.client.patch(foreign_url, {"name": "Hack"}, format="json").status_code, 404)
        self.assertEqual(self.client.delete(foreign_url).status_code, 404)
        self.foreign_customer.refresh_from_db()
        self.assertEqual(self.foreign_customer.name, "Cliente de Outra Loja")

    def test_search_filters_by_name(self):
        self.auth_as("loja", "loja123")
        self.client.post("/api/v1/customers/", self.customer_payload(), format="json")
        self.client.post(
            "/api/v1/customers/",
            self.customer_payload(name="Joao Souza", email="joao@example.com", cpf="10987654321"),
            format="json",
        )
        response = self.client.get("/api/v1/customers/?q=joao")
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["name"], "Joao Souza")

    def test_listing_degrades_to_empty_when_storage_is_down(self):
        self.auth_as("loja", "loja123")
        with mock.patch.object(CustomerViewSet, "paginate_queryset", side_effect=OperationalError("down")):
            response = self.client.get("/api/v1/customers/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 0)
        self.assertEqual(response.data["results"], [])

    def test_writes_fail_loudly_when_storage_is_down(self):
        self.auth_as("loja", "loja123")
        with mock.patch.object(CustomerViewSet, "perform_create", side_effect=OperationalError("down")):
            response = self.client.post("/api/v1/customers/", self.customer_payload(), format="json")
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.data["code"], "storage_unavailable")
