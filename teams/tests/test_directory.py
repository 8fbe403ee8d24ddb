from django.test import TestCase

from teams import directory
from teams.models import Team, TeamMember
from teams.tests.factories import make_participant


class MembershipDirectoryTests(TestCase):
    def setUp(self):
        self.leader = make_participant("lead@example.com")
        self.member = make_participant("member@example.com", gender="Female")
        self.loner = make_participant("loner@example.com")

        self.team = Team.objects.create(name="Alpha", invite_code="ABC234", leader=self.leader)
        TeamMember.objects.create(team=self.team, participant=self.leader, role=TeamMember.ROLE_LEADER)
        TeamMember.objects.create(team=self.team, participant=self.member)

    def test_resolve_leader(self):
        membership = directory.resolve("lead@example.com")
        self.assertTrue(membership.has_team)
        self.assertEqual(membership.team_name, "Alpha")
        self.assertEqual(membership.role, directory.ROLE_LEADER)

    def test_resolve_member(self):
        membership = directory.resolve("member@example.com")
        self.assertEqual(membership.role, directory.ROLE_MEMBER)
        self.assertEqual(membership.team_id, self.team.pk)

    def test_resolve_without_team(self):
        membership = directory.resolve("loner@example.com")
        self.assertFalse(membership.has_team)
        self.assertEqual(membership.as_dict(), {"has_team": False})

    def test_resolve_unknown_email(self):
        self.assertFalse(directory.resolve("nobody@example.com").has_team)

    def test_leader_without_membership_row_still_counts(self):
        TeamMember.objects.filter(participant=self.leader).delete()
        membership = directory.resolve("lead@example.com")
        self.assertTrue(membership.has_team)
        self.assertEqual(membership.role, directory.ROLE_LEADER)

    def test_multiple_teams_logs_warning_and_reports_earliest(self):
        # Leading a second team while a member of the first breaks the one-team rule
        other = Team.objects.create(name="Beta", invite_code="XYZ789", leader=self.member)

        with self.assertLogs("hackreg.teams", level="WARNING") as logs:
            membership = directory.resolve("member@example.com")

        self.assertEqual(membership.team_name, "Alpha")
        self.assertIn("member@example.com", logs.output[0])
        self.assertNotEqual(other.pk, membership.team_id)

    def test_index(self):
        index = directory.index()
        self.assertEqual(set(index), {"lead@example.com", "member@example.com"})
        self.assertEqual(index["lead@example.com"].role, directory.ROLE_LEADER)
        self.assertEqual(index["member@example.com"].as_dict()["team_name"], "Alpha")
        self.assertNotIn("loner@example.com", index)
