from django.db import IntegrityError, OperationalError
from django.test import SimpleTestCase
from rest_framework.exceptions import NotFound, Throttled

from core.exceptions import custom_exception_handler
from teams.exceptions import TeamFull


class ExceptionHandlerTests(SimpleTestCase):
    def handle(self, exc):
        return custom_exception_handler(exc, {})

    def test_domain_error_envelope(self):
        resp = self.handle(TeamFull())

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["success"], False)
        self.assertEqual(resp.data["kind"], "ConstraintViolation")
        self.assertEqual(resp.data["code"], "team_full")
        self.assertEqual(resp.data["errors"]["detail"], "Team is full (6 members).")

    def test_drf_error_gets_kind_from_status(self):
        resp = self.handle(NotFound())
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data["kind"], "NotFound")
        self.assertEqual(resp.data["code"], "not_found")

    def test_storage_errors_never_leak(self):
        with self.assertLogs("hackreg", level="WARNING"):
            resp = self.handle(IntegrityError("UNIQUE constraint failed: teams_team.name"))
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.data["kind"], "Conflict")
        self.assertNotIn("UNIQUE", str(resp.data))

        with self.assertLogs("hackreg", level="ERROR"):
            resp = self.handle(OperationalError("could not connect to server"))
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.data["kind"], "Unavailable")

    def test_retry_after_header_kept(self):
        resp = self.handle(Throttled(wait=30))
        self.assertEqual(resp.status_code, 429)
        self.assertEqual(resp["Retry-After"], "30")

    def test_unhandled_exception(self):
        with self.assertLogs("hackreg", level="ERROR"):
            resp = self.handle(RuntimeError("boom"))
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.data["errors"], {"detail": "Internal server error."})
