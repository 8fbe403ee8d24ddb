# teams/models.py
from django.db import models
from django.db.models import Q

from .rules import MAX_TEAM_SIZE


class Team(models.Model):
    """
    Hackathon team.

    Membership lives in TeamMember rows (ordered by join time, leader first).
    Rules enforced by teams.services on every mutation:
    - at most MAX_TEAM_SIZE members
    - the leader is always a member
    - a full team has at least one female member
    - a participant belongs to at most one team (also a unique constraint)
    """
    name = models.CharField(max_length=100, unique=True)
    invite_code = models.CharField(max_length=16, unique=True)
    leader = models.ForeignKey(
        "participants.Participant",
        on_delete=models.CASCADE,
        related_name="led_teams",
    )

    # Discovery metadata
    description = models.TextField(blank=True, null=True)
    skills_needed = models.JSONField(default=list, blank=True, help_text="Skills the team is looking for")
    problem_statement = models.TextField(blank=True, null=True)
    is_public = models.BooleanField(default=True, help_text="Listed in team discovery")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return self.name

    @property
    def leader_user_id(self):
        return self.leader.email

    @property
    def member_user_ids(self):
        return [m.participant.email for m in self.members.all()]

    @property
    def member_count(self):
        return self.members.count()

    @property
    def is_full(self):
        return self.member_count >= MAX_TEAM_SIZE

    @property
    def available_spots(self):
        return max(0, MAX_TEAM_SIZE - self.member_count)


class TeamMember(models.Model):
    ROLE_LEADER = "leader"
    ROLE_MEMBER = "member"

    ROLE_CHOICES = [
        (ROLE_LEADER, "Team Leader"),
        (ROLE_MEMBER, "Member"),
    ]

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="members")
    participant = models.ForeignKey(
        "participants.Participant",
        on_delete=models.CASCADE,
        related_name="team_memberships",
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_MEMBER)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["joined_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["participant"], name="teammember_one_team_per_participant"),
        ]

    def __str__(self):
        return f"{self.participant.email} in {self.team.name}"


class JoinRequest(models.Model):
    """
    A participant asking a team's leader to be let in.

    Resolved requests are kept as history. When the team is dissolved the
    request stays with `team` set to NULL and the `team_name` snapshot.
    """
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_REJECTED = "rejected"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_REJECTED, "Rejected"),
    ]

    team = models.ForeignKey(
        Team,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="join_requests",
    )
    team_name = models.CharField(max_length=100)
    user_email = models.EmailField(db_index=True)
    user_name = models.CharField(max_length=255)
    user_details = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["team", "user_email"],
                condition=Q(status="pending"),
                name="joinrequest_one_pending_per_team",
            ),
        ]

    def __str__(self):
        return f"{self.user_email} -> {self.team_name} ({self.status})"


class ConnectionRequest(models.Model):
    """
    One participant signalling interest in teaming up with another.
    Notification/audit record only; never changes membership.
    """
    STATUS_PENDING = "pending"
    STATUS_CONNECTED = "connected"
    STATUS_DECLINED = "declined"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CONNECTED, "Connected"),
        (STATUS_DECLINED, "Declined"),
    ]

    from_email = models.EmailField(db_index=True)
    from_name = models.CharField(max_length=255)
    to_email = models.EmailField(db_index=True)
    to_name = models.CharField(max_length=255)
    from_user_details = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.from_email} -> {self.to_email} ({self.status})"
