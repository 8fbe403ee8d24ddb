import json
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from participants.models import Participant
from teams import services
from teams.exceptions import TeamError
from teams.models import Team, TeamMember

DEFAULT_FIXTURE = Path(__file__).resolve().parents[2] / "fixtures" / "test_members.json"


class Command(BaseCommand):
    help = "Registers the test members from a JSON fixture and joins them to a team (or removes them)"

    def add_arguments(self, parser):
        parser.add_argument("--fixture", default=str(DEFAULT_FIXTURE), help="Path to the members JSON file")
        parser.add_argument("--team", help="Team name (defaults to the fixture's 'team')")
        parser.add_argument("--remove", action="store_true", help="Remove the fixture members instead")

    def load_fixture(self, path):
        try:
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            raise CommandError(f"Could not read fixture {path}: {e}")

        members = data.get("members") if isinstance(data, dict) else None
        if not isinstance(members, list):
            raise CommandError("Fixture must be an object with a 'members' list")
        for member in members:
            if not isinstance(member, dict) or not member.get("email") or not member.get("gender"):
                raise CommandError(f"Fixture member needs an email and a gender: {member!r}")
        return data

    def handle(self, *args, **options):
        data = self.load_fixture(options["fixture"])
        team_name = options["team"] or data.get("team")
        if not team_name:
            raise CommandError("No team given (use --team or set 'team' in the fixture)")

        team = Team.objects.filter(name=team_name).first()
        if team is None:
            raise CommandError(f"Team '{team_name}' not found")

        if options["remove"]:
            self.remove(team, data["members"])
        else:
            self.add(team, data["members"])

    def add(self, team, members):
        self.stdout.write(f"Adding {len(members)} test members to {team.name} ({team.member_count} members now)")

        added = 0
        for member in members:
            email = member["email"]
            Participant.objects.update_or_create(
                email=email,
                defaults={
                    "name": member.get("name") or email,
                    "gender": member["gender"],
                    "fields": member.get("fields") or {},
                },
            )
            try:
                services.join_by_code(email, team.invite_code)
            except TeamError as e:
                self.stderr.write(f"  skipped {email}: {e.detail}")
                continue
            added += 1
            self.stdout.write(f"  added {email}")

        self.stdout.write(self.style.SUCCESS(f"Added {added} members; {team.name} now has {team.member_count}"))

    def remove(self, team, members):
        emails = [m["email"] for m in members if m["email"] != team.leader.email]

        with transaction.atomic():
            removed, _ = TeamMember.objects.filter(team=team, participant__email__in=emails).delete()
            Participant.objects.filter(email__in=emails).delete()

        self.stdout.write(self.style.SUCCESS(f"Removed {removed} members; {team.name} now has {team.member_count}"))
