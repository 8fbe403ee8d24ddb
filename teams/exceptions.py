# teams/exceptions.py
"""
Failures of the team-composition engine.

Each one is a DRF APIException, so views can let them propagate and the
project exception handler renders {"success": false, "kind", "code", ...}.
"""
from rest_framework import status

from core.exceptions import (
    DomainError,
    KIND_CONFLICT,
    KIND_CONSTRAINT,
    KIND_NOT_FOUND,
    KIND_UNAUTHORIZED,
    KIND_UNAVAILABLE,
    KIND_VALIDATION,
)
from .rules import MAX_TEAM_SIZE


class TeamError(DomainError):
    pass


# --- ValidationError ---

class TeamValidationError(TeamError):
    kind = KIND_VALIDATION
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid team request."
    default_code = "invalid"


# --- NotFound ---

class NotFoundError(TeamError):
    kind = KIND_NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND


class NotRegistered(NotFoundError):
    default_detail = "Complete registration first."
    default_code = "not_registered"


class UserNotFound(NotFoundError):
    default_detail = "User not found."
    default_code = "user_not_found"


class TeamNotFound(NotFoundError):
    default_detail = "Team not found."
    default_code = "team_not_found"


class InvalidInviteCode(NotFoundError):
    default_detail = "Invalid invite code."
    default_code = "invalid_invite_code"


class RequestNotFound(NotFoundError):
    default_detail = "Join request not found."
    default_code = "request_not_found"


class NotInTeam(NotFoundError):
    default_detail = "Not in a team."
    default_code = "not_in_team"


# --- Conflict ---

class ConflictError(TeamError):
    kind = KIND_CONFLICT
    status_code = status.HTTP_409_CONFLICT


class AlreadyInTeam(ConflictError):
    default_detail = "You are already in a team."
    default_code = "already_in_team"


class AlreadyInAnotherTeam(ConflictError):
    default_detail = "You are already part of a team."
    default_code = "already_in_another_team"


class AlreadyMember(ConflictError):
    default_detail = "You are already a member of this team."
    default_code = "already_member"


class DuplicateName(ConflictError):
    default_detail = "Team name already taken."
    default_code = "duplicate_name"


class CodeCollision(ConflictError):
    default_detail = "Could not generate a unique invite code. Please try again."
    default_code = "code_collision"


class DuplicateRequest(ConflictError):
    default_detail = "You already have a pending request for this team."
    default_code = "duplicate_request"


class RequestAlreadyResolved(ConflictError):
    default_detail = "This join request has already been resolved."
    default_code = "request_already_resolved"


class RecipientInTeam(ConflictError):
    default_detail = "The person you're trying to connect with is already in a team."
    default_code = "recipient_in_team"


# --- ConstraintViolation ---

class ConstraintError(TeamError):
    kind = KIND_CONSTRAINT
    status_code = status.HTTP_400_BAD_REQUEST


class TeamFull(ConstraintError):
    default_detail = f"Team is full ({MAX_TEAM_SIZE} members)."
    default_code = "team_full"


class GenderConstraintViolation(ConstraintError):
    default_detail = (
        f"Team joining would violate constraints. Teams must have {MAX_TEAM_SIZE} members "
        "and at least 1 female member. The last slot must be taken by a female if none in team yet."
    )
    default_code = "gender_constraint"


class LeaderCannotLeave(ConstraintError):
    default_detail = "Leader cannot leave; delete the team instead."
    default_code = "leader_cannot_leave"


# --- Unauthorized ---

class UnauthorizedError(TeamError):
    kind = KIND_UNAUTHORIZED
    status_code = status.HTTP_403_FORBIDDEN


class NotTeamLeader(UnauthorizedError):
    default_detail = "Unauthorized: You are not the team leader."
    default_code = "unauthorized"


class NotLeaderOrNoTeam(UnauthorizedError):
    default_detail = "Not leader or no team."
    default_code = "not_leader_or_no_team"


# --- Unavailable ---

class StorageUnavailable(TeamError):
    kind = KIND_UNAVAILABLE
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Team storage is temporarily unavailable. Please try again."
    default_code = "unavailable"
