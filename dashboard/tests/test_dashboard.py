import csv
import io
import json
import tempfile
from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings

from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from dashboard.tasks import send_broadcast_email_task
from teams import services
from teams.models import Team, TeamMember
from teams.tests.factories import make_participant


User = get_user_model()


def read_csv(response):
    content = b"".join(response.streaming_content) if response.streaming else response.content
    return list(csv.reader(io.StringIO(content.decode("utf-8"))))


@override_settings(ADMIN_EMAILS=["organizer@example.com"])
class DashboardApiTests(APITestCase):
    base_api = "/api/dashboard/"

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.organizer = User.objects.create_user(
            username="organizer", email="Organizer@example.com", password="pass1234"
        )
        self.participant_user = User.objects.create_user(
            username="lead", email="lead@example.com", password="pass1234"
        )

        make_participant("lead@example.com", skills=["Go"])
        make_participant("amy@example.com", gender="Female", bio="Hi")
        self.team = services.create_team("lead@example.com", "Alpha")

    def test_non_admin_forbidden(self):
        self.client.force_authenticate(user=self.participant_user)
        for path in ("participants/", "teams/", "export/participants/", "export/teams/"):
            resp = self.client.get(f"{self.base_api}{path}")
            self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN, path)

    def test_staff_is_admin(self):
        staff = User.objects.create_user(username="staff", email="staff@example.com", is_staff=True)
        self.client.force_authenticate(user=staff)
        resp = self.client.get(f"{self.base_api}teams/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)

    def test_participants_list(self):
        self.client.force_authenticate(user=self.organizer)
        resp = self.client.get(f"{self.base_api}participants/")

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)
        self.assertEqual(resp.data["count"], 2)
        by_email = {p["email"]: p for p in resp.data["participants"]}
        self.assertEqual(by_email["lead@example.com"]["team_status"]["role"], "Leader")
        self.assertEqual(by_email["amy@example.com"]["team_status"], {"has_team": False})

    def test_teams_list(self):
        self.client.force_authenticate(user=self.organizer)
        resp = self.client.get(f"{self.base_api}teams/")

        self.assertEqual(resp.data["count"], 1)
        self.assertEqual(resp.data["teams"][0]["member_count"], 1)

    def test_teams_list_query_count_is_flat(self):
        make_participant("other@example.com")
        services.join_by_code("amy@example.com", self.team.invite_code)
        services.create_team("other@example.com", "Beta")

        with self.assertNumQueries(3):
            teams = list(Team.objects.prefetch_related("members__participant"))
            data = [(t.member_user_ids, t.member_count) for t in teams]

        self.assertEqual(data[0], (["lead@example.com", "amy@example.com"], 2))
        self.assertEqual(data[1], (["other@example.com"], 1))

    def test_broadcast_queues_task(self):
        self.client.force_authenticate(user=self.organizer)
        with mock.patch("dashboard.views.send_broadcast_email_task.delay") as delay:
            resp = self.client.post(
                f"{self.base_api}broadcast/",
                {"subject": "Kickoff", "message": "See you at 9"},
                format="json",
            )

        self.assertEqual(resp.status_code, status.HTTP_202_ACCEPTED, resp.content)
        self.assertEqual(resp.data["count"], 2)
        delay.assert_called_once_with("Kickoff", "See you at 9")

    def test_broadcast_requires_subject_and_message(self):
        self.client.force_authenticate(user=self.organizer)
        resp = self.client.post(f"{self.base_api}broadcast/", {"subject": "Kickoff"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST, resp.content)
        self.assertEqual(resp.data["kind"], "ValidationError")

    def test_export_participants(self):
        self.client.force_authenticate(user=self.organizer)
        resp = self.client.get(f"{self.base_api}export/participants/")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp["Content-Type"], "text/csv")
        rows = read_csv(resp)
        header = rows[0]
        self.assertEqual(
            header,
            ["email", "user_id", "name", "gender", "created_at", "updated_at",
             "bio", "department", "phone", "skills", "year",
             "team_name", "team_role", "has_team"],
        )
        lead = dict(zip(header, rows[1]))
        amy = dict(zip(header, rows[2]))
        self.assertEqual(lead["team_name"], "Alpha")
        self.assertEqual(lead["team_role"], "Leader")
        self.assertEqual(lead["has_team"], "Yes")
        self.assertEqual(lead["skills"], "Go")
        self.assertEqual(amy["team_name"], "No Team")
        self.assertEqual(amy["has_team"], "No")
        self.assertEqual(amy["bio"], "Hi")

    def test_export_teams(self):
        self.client.force_authenticate(user=self.organizer)
        resp = self.client.get(f"{self.base_api}export/teams/")

        rows = read_csv(resp)
        team = dict(zip(rows[0], rows[1]))
        self.assertEqual(team["name"], "Alpha")
        self.assertEqual(team["member_count"], "1")
        self.assertEqual(team["member_user_ids"], "lead@example.com")


class BroadcastTaskTests(TestCase):
    def test_sends_one_bcc_message(self):
        make_participant("a@example.com")
        make_participant("b@example.com")

        sent = send_broadcast_email_task("Kickoff", "See you at 9")

        self.assertEqual(sent, 2)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].bcc, ["a@example.com", "b@example.com"])
        self.assertEqual(mail.outbox[0].to, [])
        self.assertEqual(mail.outbox[0].subject, "Kickoff")

    def test_no_recipients(self):
        self.assertEqual(send_broadcast_email_task("Kickoff", "See you at 9"), 0)
        self.assertEqual(len(mail.outbox), 0)


class TestMembersCommandTests(TestCase):
    def setUp(self):
        make_participant("lead@example.com")
        self.team = services.create_team("lead@example.com", "Tekions")

    def write_fixture(self, data):
        fh = tempfile.NamedTemporaryFile("w", suffix=".json", delete=False, encoding="utf-8")
        with fh:
            json.dump(data, fh)
        return fh.name

    def test_adds_and_removes_bundled_members(self):
        call_command("load_test_members", stdout=io.StringIO(), stderr=io.StringIO())
        self.assertEqual(self.team.member_count, 5)

        call_command("load_test_members", "--remove", stdout=io.StringIO())
        self.assertEqual(self.team.member_user_ids, ["lead@example.com"])
        self.assertFalse(TeamMember.objects.filter(participant__email__startswith="testmember").exists())

    def test_members_go_through_team_rules(self):
        path = self.write_fixture({
            "team": "Tekions",
            "members": [
                {"email": f"m{i}@example.com", "name": f"M{i}", "gender": "Male"} for i in range(5)
            ],
        })
        err = io.StringIO()

        call_command("load_test_members", "--fixture", path, stdout=io.StringIO(), stderr=err)

        # Fifth member would take the last slot without a female on the team
        self.assertEqual(self.team.member_count, 5)
        self.assertIn("m4@example.com", err.getvalue())

    def test_unknown_team(self):
        with self.assertRaises(CommandError):
            call_command("load_test_members", "--team", "Nope", stdout=io.StringIO())

    def test_bad_fixture(self):
        path = self.write_fixture({"members": "everyone"})
        with self.assertRaises(CommandError):
            call_command("load_test_members", "--fixture", path, "--team", "Tekions", stdout=io.StringIO())

    def test_team_name_from_option(self):
        make_participant("other@example.com")
        other = services.create_team("other@example.com", "Other")
        call_command("load_test_members", "--team", "Other", stdout=io.StringIO(), stderr=io.StringIO())
        self.assertEqual(other.member_count, 5)
        self.assertEqual(Team.objects.get(name="Tekions").member_count, 1)
