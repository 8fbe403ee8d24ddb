# teams/services.py
"""
Team composition engine.

Every transition re-reads team state inside transaction.atomic() with the
Team row locked (select_for_update), validates the team rules and only then
writes. Views call these functions and let the TeamError subclasses
propagate to the project exception handler.
"""
from dataclasses import dataclass
from functools import wraps
from typing import Optional
import logging

from django.conf import settings
from django.db import IntegrityError, InterfaceError, OperationalError, transaction
from django.db.models import Count

from participants.models import Participant
from . import directory
from .exceptions import (
    AlreadyInAnotherTeam,
    AlreadyInTeam,
    AlreadyMember,
    CodeCollision,
    DuplicateName,
    DuplicateRequest,
    GenderConstraintViolation,
    InvalidInviteCode,
    LeaderCannotLeave,
    NotInTeam,
    NotLeaderOrNoTeam,
    NotRegistered,
    NotTeamLeader,
    RecipientInTeam,
    RequestAlreadyResolved,
    RequestNotFound,
    StorageUnavailable,
    TeamFull,
    TeamNotFound,
    TeamValidationError,
    UserNotFound,
)
from .models import ConnectionRequest, JoinRequest, Team, TeamMember
from .rules import (
    MAX_TEAM_SIZE,
    can_join_preserving_female_requirement,
    generate_invite_code,
    normalize_invite_code,
)

logger = logging.getLogger("hackreg.teams")

ACTION_ACCEPT = "accept"
ACTION_REJECT = "reject"

OUTCOME_ACCEPTED = "accepted"
OUTCOME_REJECTED = "rejected"
OUTCOME_ALREADY_IN_TEAM = "already_in_team"

DETAIL_FIELDS = ("description", "skills_needed", "problem_statement", "is_public")
TEAM_NAME_MAX_LENGTH = 100


@dataclass(frozen=True)
class ResolveOutcome:
    outcome: str
    team: Team
    join_request: Optional[JoinRequest] = None

    @property
    def message(self):
        if self.outcome == OUTCOME_ACCEPTED:
            return "Join request accepted."
        if self.outcome == OUTCOME_REJECTED:
            return "Join request rejected."
        return "User is already in another team. Request removed."


def storage_guard(func):
    """Connectivity failures surface as StorageUnavailable (503)."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            logger.error(f"{func.__name__} failed, storage unavailable: {e}")
            raise StorageUnavailable() from e

    return wrapper


# ---------- helpers ----------

def _get_participant(email) -> Participant:
    participant = Participant.objects.filter(email=email).first()
    if participant is None:
        raise NotRegistered()
    return participant


def _lock_team(pk) -> Optional[Team]:
    return Team.objects.select_for_update().filter(pk=pk).first()


def _member_genders(team: Team):
    return list(team.members.values_list("participant__gender", flat=True))


def _add_member(team: Team, participant: Participant, role=TeamMember.ROLE_MEMBER) -> TeamMember:
    """
    Add `participant` to a team whose row the caller holds locked.
    Size and gender are checked against the members as they are now.
    """
    genders = _member_genders(team)
    if len(genders) >= MAX_TEAM_SIZE:
        raise TeamFull()
    if not can_join_preserving_female_requirement(genders, participant.gender):
        logger.warning(
            f"{participant.email} rejected from {team.name}: last slot reserved for a female member"
        )
        raise GenderConstraintViolation()

    try:
        with transaction.atomic():
            member = TeamMember.objects.create(team=team, participant=participant, role=role)
    except IntegrityError as e:
        # one-team-per-participant constraint lost a race
        raise AlreadyInTeam() from e

    team.save(update_fields=["updated_at"])
    return member


def clean_team_details(data) -> dict:
    """
    Normalise the editable discovery metadata. Keys outside DETAIL_FIELDS are ignored.
    """
    cleaned = {}
    for key in DETAIL_FIELDS:
        if key not in data:
            continue
        value = data[key]

        if key == "skills_needed":
            if value is None:
                value = []
            if isinstance(value, str):
                value = value.split(",")
            if not isinstance(value, (list, tuple)):
                raise TeamValidationError({"skills_needed": ["Must be a list of skills."]})
            value = [str(s).strip() for s in value if str(s).strip()]
        elif key == "is_public":
            if not isinstance(value, bool):
                raise TeamValidationError({"is_public": ["Must be true or false."]})
        else:
            if value is not None and not isinstance(value, str):
                raise TeamValidationError({key: ["Must be text."]})
            value = (value or "").strip() or None

        cleaned[key] = value
    return cleaned


# ---------- transitions ----------

@storage_guard
def create_team(email, name, **details) -> Team:
    name = name.strip() if isinstance(name, str) else ""
    if not name:
        raise TeamValidationError("Team name required.")
    if len(name) > TEAM_NAME_MAX_LENGTH:
        raise TeamValidationError(f"Team name must be at most {TEAM_NAME_MAX_LENGTH} characters.")
    details = clean_team_details(details)

    participant = _get_participant(email)

    for attempt in range(1, settings.TEAM_INVITE_CODE_ATTEMPTS + 1):
        code = generate_invite_code()
        try:
            with transaction.atomic():
                # serialises concurrent create/join calls by the same participant
                Participant.objects.select_for_update().filter(pk=participant.pk).first()
                if directory.find_team(email) is not None:
                    raise AlreadyInTeam()
                if Team.objects.filter(name=name).exists():
                    raise DuplicateName()

                team = Team.objects.create(name=name, invite_code=code, leader=participant, **details)
                TeamMember.objects.create(team=team, participant=participant, role=TeamMember.ROLE_LEADER)
        except IntegrityError as e:
            if Team.objects.filter(name=name).exists():
                raise DuplicateName() from e
            if TeamMember.objects.filter(participant=participant).exists():
                raise AlreadyInTeam() from e
            logger.warning(f"Invite code collision on attempt {attempt} for team {name}")
            continue

        logger.info(f"Team created: {team.name} (leader={email}, code={team.invite_code})")
        return team

    logger.error(f"Gave up generating an invite code for team {name}")
    raise CodeCollision()


@storage_guard
def join_by_code(email, invite_code) -> Team:
    code = normalize_invite_code(invite_code)
    if not code:
        raise TeamValidationError("Invite code required.")

    participant = _get_participant(email)

    with transaction.atomic():
        Participant.objects.select_for_update().filter(pk=participant.pk).first()
        if directory.find_team(email) is not None:
            raise AlreadyInTeam()

        team = Team.objects.select_for_update().filter(invite_code=code).first()
        if team is None:
            raise InvalidInviteCode()

        _add_member(team, participant)

    logger.info(f"{email} joined {team.name} by invite code")
    return team


@storage_guard
def leave_team(email) -> Team:
    with transaction.atomic():
        membership = TeamMember.objects.filter(participant__email=email).first()
        if membership is None:
            if Team.objects.filter(leader__email=email).exists():
                raise LeaderCannotLeave()
            raise NotInTeam()

        team = _lock_team(membership.team_id)
        if team is None:
            raise NotInTeam()
        if team.leader.email == email:
            raise LeaderCannotLeave()

        membership.delete()
        team.save(update_fields=["updated_at"])

    logger.info(f"{email} left {team.name}")
    return team


@storage_guard
def dissolve_team(email) -> str:
    """
    Delete the team `email` leads. Members become team-less; their
    participant records are untouched. Returns the dissolved team's name.
    """
    with transaction.atomic():
        team_id = Team.objects.filter(leader__email=email).values_list("pk", flat=True).first()
        team = _lock_team(team_id) if team_id is not None else None
        if team is None:
            raise NotLeaderOrNoTeam()

        name = team.name
        team.delete()

    logger.info(f"Team dissolved: {name} (leader={email})")
    return name


@storage_guard
def update_team_details(email, **details) -> Team:
    details = clean_team_details(details)

    with transaction.atomic():
        team_id = Team.objects.filter(leader__email=email).values_list("pk", flat=True).first()
        team = _lock_team(team_id) if team_id is not None else None
        if team is None:
            raise NotLeaderOrNoTeam()

        for key, value in details.items():
            setattr(team, key, value)
        team.save(update_fields=list(details) + ["updated_at"])

    logger.info(f"Team details updated: {team.name} ({', '.join(details) or 'no changes'})")
    return team


# ---------- join requests ----------

@storage_guard
def request_to_join(team_id, user_email) -> JoinRequest:
    if not team_id or not user_email:
        raise TeamValidationError("Team ID and user email are required.")
    try:
        team_id = int(team_id)
    except (TypeError, ValueError):
        raise TeamNotFound()

    with transaction.atomic():
        team = _lock_team(team_id)
        if team is None:
            raise TeamNotFound()

        member_emails = list(team.members.values_list("participant__email", flat=True))
        if len(member_emails) >= MAX_TEAM_SIZE:
            raise TeamFull("Team is already full.")
        if user_email == team.leader.email or user_email in member_emails:
            raise AlreadyMember()

        if JoinRequest.objects.filter(
            team=team, user_email=user_email, status=JoinRequest.STATUS_PENDING
        ).exists():
            raise DuplicateRequest()

        participant = Participant.objects.filter(email=user_email).first()
        if participant is None:
            raise UserNotFound()
        if directory.find_team(user_email) is not None:
            raise AlreadyInAnotherTeam()

        try:
            with transaction.atomic():
                join_request = JoinRequest.objects.create(
                    team=team,
                    team_name=team.name,
                    user_email=user_email,
                    user_name=participant.name,
                    user_details=participant.snapshot(),
                )
        except IntegrityError as e:
            raise DuplicateRequest() from e

    logger.info(f"Join request #{join_request.pk}: {user_email} -> {team.name}")
    return join_request


@storage_guard
def resolve_request(leader_email, request_id, action) -> ResolveOutcome:
    if action not in (ACTION_ACCEPT, ACTION_REJECT):
        raise TeamValidationError("Invalid action. Must be 'accept' or 'reject'.")

    with transaction.atomic():
        join_request = JoinRequest.objects.select_for_update().filter(pk=request_id).first()
        if join_request is None:
            raise RequestNotFound()

        team = _lock_team(join_request.team_id) if join_request.team_id is not None else None
        if team is None:
            raise TeamNotFound()
        if team.leader.email != leader_email:
            raise NotTeamLeader()
        if join_request.status != JoinRequest.STATUS_PENDING:
            raise RequestAlreadyResolved()

        if action == ACTION_REJECT:
            join_request.status = JoinRequest.STATUS_REJECTED
            join_request.save(update_fields=["status", "updated_at"])
            logger.info(f"Join request #{join_request.pk} rejected by {leader_email}")
            return ResolveOutcome(OUTCOME_REJECTED, team, join_request)

        if team.members.count() >= MAX_TEAM_SIZE:
            raise TeamFull("Team is already full.")

        participant = Participant.objects.filter(email=join_request.user_email).first()
        if participant is None:
            raise UserNotFound()

        already_in_team = directory.find_team(participant.email) is not None
        if not already_in_team:
            try:
                _add_member(team, participant)
            except AlreadyInTeam:
                already_in_team = True

        if already_in_team:
            request_pk = join_request.pk
            join_request.delete()
            logger.warning(
                f"Join request #{request_pk} removed: {participant.email} already belongs to a team"
            )
            return ResolveOutcome(OUTCOME_ALREADY_IN_TEAM, team)

        # membership first, then the request status
        join_request.status = JoinRequest.STATUS_ACCEPTED
        join_request.save(update_fields=["status", "updated_at"])

    logger.info(f"Join request #{join_request.pk} accepted: {participant.email} joined {team.name}")
    return ResolveOutcome(OUTCOME_ACCEPTED, team, join_request)


# ---------- read side ----------

def pending_requests_for_leader(email):
    return (
        JoinRequest.objects
        .filter(team__leader__email=email, status=JoinRequest.STATUS_PENDING)
        .select_related("team")
        .order_by("created_at", "id")
    )


def pending_team_ids_for_user(email):
    return list(
        JoinRequest.objects
        .filter(user_email=email, status=JoinRequest.STATUS_PENDING, team__isnull=False)
        .values_list("team_id", flat=True)
    )


def team_status(email):
    """
    (team, members) for the caller's team, or (None, []).
    members are {"name", "gender", "email"} dicts in join order.
    """
    team = directory.find_team(email)
    if team is None:
        return None, []
    members = [
        {
            "name": m.participant.name,
            "gender": m.participant.gender,
            "email": m.participant.email,
        }
        for m in team.members.select_related("participant")
    ]
    return team, members


def discoverable_teams():
    return (
        Team.objects
        .filter(is_public=True)
        .annotate(num_members=Count("members"))
        .filter(num_members__lt=MAX_TEAM_SIZE)
        .select_related("leader")
        .order_by("created_at")
    )


def available_members():
    """Registered participants who belong to no team."""
    taken = directory.index()
    return Participant.objects.exclude(email__in=list(taken)).order_by("created_at")


# ---------- connection requests ----------

@storage_guard
def send_connection_request(from_email, to_email) -> ConnectionRequest:
    to_email = to_email.strip() if isinstance(to_email, str) else ""
    if not from_email or not to_email:
        raise TeamValidationError("Both sender and recipient emails are required.")
    if from_email == to_email:
        raise TeamValidationError("You cannot connect with yourself.")

    sender = Participant.objects.filter(email=from_email).first()
    recipient = Participant.objects.filter(email=to_email).first()
    if sender is None or recipient is None:
        raise UserNotFound("One or both users not found.")

    if directory.find_team(from_email) is not None:
        raise AlreadyInAnotherTeam()
    if directory.find_team(to_email) is not None:
        raise RecipientInTeam()

    connection = ConnectionRequest.objects.create(
        from_email=sender.email,
        from_name=sender.name,
        to_email=recipient.email,
        to_name=recipient.name,
        from_user_details=sender.snapshot(),
    )
    logger.info(f"Connection request #{connection.pk}: {from_email} -> {to_email}")
    return connection
