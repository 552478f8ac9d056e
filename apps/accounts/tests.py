from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import CommandError, call_command
from django.test import override_settings
from rest_framework.test import APITestCase

from apps.accounts.models import UserRole

User = get_user_model()


class AuthApiTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="caixa", password="caixa123", email="caixa@example.com")

    def auth(self, username, password):
        return self.client.post(
            "/api/v1/auth/token/",
            {"username": username, "password": password},
            format="json",
        )

    def test_jwt_login_valid_and_invalid(self):
        ok = self.auth("caixa", "caixa123")
        self.assertEqual(ok.status_code, 200)
        self.assertIn("access", ok.data)
        self.user.refresh_from_db()
        self.assertIsNotNone(self.user.last_signed_in)

        bad = self.auth("caixa", "wrong")
        self.assertEqual(bad.status_code, 401)
        self.assertEqual(set(bad.data), {"code", "detail", "fields"})

    def test_me_returns_user_or_null(self):
        anonymous = self.client.get("/api/v1/auth/me/")
        self.assertEqual(anonymous.status_code, 200)
        self.assertIsNone(anonymous.data)

        token = self.auth("caixa", "caixa123").data["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        me = self.client.get("/api/v1/auth/me/")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.data["id"], self.user.id)
        self.assertEqual(me.data["email"], "caixa@example.com")
        self.assertEqual(me.data["role"], UserRole.USER)

    def test_logout_clears_session(self):
        self.client.login(username="caixa", password="caixa123")
        self.assertEqual(self.client.get("/api/v1/auth/me/").data["id"], self.user.id)

        response = self.client.post("/api/v1/auth/logout/", {}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, {"success": True})

        self.assertIsNone(self.client.get("/api/v1/auth/me/").data)

    def test_protected_endpoints_require_authentication(self):
        self.assertEqual(self.client.get("/api/v1/customers/").status_code, 401)
        self.assertEqual(self.client.get("/api/v1/sales/").status_code, 401)


class BootstrapOwnerCommandTests(APITestCase):
    @override_settings(OWNER_EMAIL="dona@example.com")
    def test_promotes_configured_owner(self):
        owner = User.objects.create_user(username="dona", password="x", email="Dona@example.com")
        other = User.objects.create_user(username="outro", password="x", email="outro@example.com")

        out = StringIO()
        call_command("bootstrap_owner", stdout=out)

        owner.refresh_from_db()
        other.refresh_from_db()
        self.assertEqual(owner.role, UserRole.ADMIN)
        self.assertEqual(other.role, UserRole.USER)
        self.assertIn("promoted", out.getvalue())

    @override_settings(OWNER_EMAIL="")
    def test_fails_without_configuration(self):
        with self.assertRaises(CommandError):
            call_command("bootstrap_owner", stdout=StringIO())
