from unittest import mock

from django.db import OperationalError
from rest_framework.test import APITestCase


class HealthApiTests(APITestCase):
    def test_health_reports_database_ok_without_auth(self):
        response = self.client.get("/health/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, {"status": "ok", "database": "ok"})

    def test_health_reports_degraded_when_database_is_down(self):
        with mock.patch("apps.health.views.connection") as connection:
            connection.cursor.side_effect = OperationalError("down")
            response = self.client.get("/health/")
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.data["database"], "unavailable")
