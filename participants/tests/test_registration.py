from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail

from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from participants.models import Participant


User = get_user_model()


def registration(**overrides):
    fields = {
        "name": "Amy Shah",
        "gender": "Female",
        "phone": "+91-9876543210",
        "department": "Computer Science",
        "year": "2nd Year",
        "skills": ["Python", "Figma"],
    }
    fields.update(overrides)
    return {"fields": fields}


class RegistrationApiTests(APITestCase):
    url = "/api/participants/me/"

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="amy", email="amy@example.com", password="pass1234")
        self.client.force_authenticate(user=self.user)

    def test_schema_is_public(self):
        self.client.force_authenticate(user=None)
        resp = self.client.get("/api/participants/schema/")

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)
        keys = [f["key"] for f in resp.data["fields"]]
        self.assertIn("name", keys)
        self.assertIn("gender", keys)

    def test_get_before_registration(self):
        resp = self.client.get(self.url)
        self.assertIsNone(resp.data["participant"])
        self.assertEqual(resp.data["session_user"]["email"], "amy@example.com")

    def test_register_then_update(self):
        resp = self.client.post(self.url, registration(), format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.content)
        self.assertEqual(resp.data, {"ok": True, "created": True})

        participant = Participant.objects.get(email="amy@example.com")
        self.assertEqual(participant.name, "Amy Shah")
        self.assertEqual(participant.gender, "Female")
        self.assertEqual(participant.fields["skills"], ["Python", "Figma"])

        # Confirmation email on first registration only
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["amy@example.com"])

        resp = self.client.post(self.url, registration(year="3rd Year"), format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)
        self.assertEqual(resp.data, {"ok": True, "updated": True})
        self.assertEqual(Participant.objects.get(email="amy@example.com").fields["year"], "3rd Year")
        self.assertEqual(len(mail.outbox), 1)

        resp = self.client.get(self.url)
        self.assertEqual(resp.data["participant"]["user_id"], "amy@example.com")

    def test_missing_required_fields(self):
        payload = registration()
        del payload["fields"]["gender"]

        resp = self.client.post(self.url, payload, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST, resp.content)
        self.assertIn("gender", resp.data["errors"])
        self.assertFalse(Participant.objects.exists())

    def test_unknown_field_rejected(self):
        resp = self.client.post(self.url, registration(shoe_size="7"), format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST, resp.content)
        self.assertIn("shoe_size", resp.data["errors"])

    def test_fields_must_be_object(self):
        resp = self.client.post(self.url, {"fields": ["name"]}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST, resp.content)

    def test_body_must_be_object(self):
        resp = self.client.post(self.url, [1, 2], format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST, resp.content)
        self.assertEqual(resp.data["kind"], "ValidationError")
        self.assertIn("fields", resp.data["errors"])
        self.assertFalse(Participant.objects.exists())

    def test_email_failure_does_not_fail_registration(self):
        with mock.patch("participants.views.send_registration_email", side_effect=OSError("smtp down")):
            with self.assertLogs("hackreg.participants", level="WARNING"):
                resp = self.client.post(self.url, registration(), format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.content)
        self.assertTrue(Participant.objects.filter(email="amy@example.com").exists())

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        resp = self.client.post(self.url, registration(), format="json")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
