# teams/directory.py
"""
Membership directory: which team (if any) a participant belongs to, and as what.

Nothing is stored on the participant. Every answer is a scan of TeamMember
rows and team leaders at read time, so it can't go stale when membership
changes through join-by-code, accepted requests, leaving or dissolving.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from .models import Team, TeamMember

logger = logging.getLogger("hackreg.teams")

ROLE_LEADER = "Leader"
ROLE_MEMBER = "Member"


@dataclass(frozen=True)
class Membership:
    has_team: bool
    team_name: Optional[str] = None
    role: Optional[str] = None
    team_id: Optional[int] = None

    def as_dict(self):
        if not self.has_team:
            return {"has_team": False}
        return {
            "has_team": True,
            "team_id": self.team_id,
            "team_name": self.team_name,
            "role": self.role,
        }


NO_TEAM = Membership(has_team=False)


def _membership_for(team: Team, email: str) -> Membership:
    role = ROLE_LEADER if team.leader.email == email else ROLE_MEMBER
    return Membership(has_team=True, team_name=team.name, role=role, team_id=team.pk)


def teams_for(email: str):
    """
    Every team listing `email` as leader or member, oldest first.
    More than one entry means the one-team rule was broken.
    """
    teams = {}
    rows = (
        TeamMember.objects
        .filter(participant__email=email)
        .select_related("team", "team__leader")
        .order_by("team__created_at", "team_id")
    )
    for row in rows:
        teams.setdefault(row.team_id, row.team)

    for team in Team.objects.filter(leader__email=email).select_related("leader"):
        teams.setdefault(team.pk, team)

    return sorted(teams.values(), key=lambda t: (t.created_at, t.pk))


def find_team(email: str) -> Optional[Team]:
    teams = teams_for(email)
    if not teams:
        return None
    if len(teams) > 1:
        logger.warning(
            f"Participant {email} found in {len(teams)} teams: "
            f"{', '.join(t.name for t in teams)}. Reporting {teams[0].name}."
        )
    return teams[0]


def resolve(email: str) -> Membership:
    team = find_team(email)
    if team is None:
        return NO_TEAM
    return _membership_for(team, email)


def index():
    """
    One scan of all memberships -> {email: Membership}, for bulk readers
    (exports, member discovery).
    """
    result = {}
    rows = (
        TeamMember.objects
        .select_related("team", "team__leader", "participant")
        .order_by("team__created_at", "team_id", "joined_at", "id")
    )
    for row in rows:
        email = row.participant.email
        if email in result:
            logger.warning(f"Participant {email} found in more than one team; keeping {result[email].team_name}")
            continue
        result[email] = _membership_for(row.team, email)

    # Leaders missing a membership row would otherwise read as team-less
    for team in Team.objects.select_related("leader"):
        result.setdefault(team.leader.email, _membership_for(team, team.leader.email))

    return result
