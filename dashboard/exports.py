# dashboard/exports.py
"""
CSV rows for the organizer exports.

Participants get one column per registration field key seen across all
participants (sorted), then their team membership from the directory.
"""
import csv

from participants.models import Participant
from teams import directory
from teams.models import Team

PARTICIPANT_BASE_COLUMNS = ["email", "user_id", "name", "gender", "created_at", "updated_at"]
PARTICIPANT_TEAM_COLUMNS = ["team_name", "team_role", "has_team"]

TEAM_COLUMNS = [
    "id", "name", "invite_code", "leader_user_id", "member_user_ids", "member_count",
    "description", "skills_needed", "problem_statement", "is_public",
    "created_at", "updated_at",
]


def cell(value):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def participant_rows():
    participants = list(Participant.objects.order_by("created_at"))
    memberships = directory.index()

    dynamic_keys = sorted({key for p in participants for key in (p.fields or {})})
    yield PARTICIPANT_BASE_COLUMNS + dynamic_keys + PARTICIPANT_TEAM_COLUMNS

    for p in participants:
        fields = p.fields or {}
        membership = memberships.get(p.email, directory.NO_TEAM)
        row = [p.email, p.user_id, p.name, p.gender, p.created_at, p.updated_at]
        row += [fields.get(key, "") for key in dynamic_keys]
        row += [
            membership.team_name or "No Team",
            membership.role or "No Role",
            membership.has_team,
        ]
        yield [cell(v) for v in row]


def team_rows():
    yield TEAM_COLUMNS

    teams = Team.objects.select_related("leader").prefetch_related("members__participant").order_by("created_at")
    for team in teams:
        member_ids = [m.participant.email for m in team.members.all()]
        row = [
            team.pk, team.name, team.invite_code, team.leader.email, member_ids, len(member_ids),
            team.description, team.skills_needed, team.problem_statement, team.is_public,
            team.created_at, team.updated_at,
        ]
        yield [cell(v) for v in row]


def write_csv(stream, rows):
    writer = csv.writer(stream)
    for row in rows:
        writer.writerow(row)
    return stream
