from participants.models import Participant
from teams.models import TeamMember


def make_participant(email, gender="Male", name=None, **fields):
    fields.setdefault("department", "CSE")
    fields.setdefault("year", "2nd Year")
    fields.setdefault("phone", "9999999999")
    return Participant.objects.create(
        email=email,
        name=name or email.split("@")[0].title(),
        gender=gender,
        fields=fields,
    )


def add_members(team, genders, prefix="member"):
    """Put participants straight into `team`, bypassing the engine."""
    created = []
    for i, gender in enumerate(genders):
        participant = make_participant(f"{prefix}{i}.{team.pk}@example.com", gender=gender)
        TeamMember.objects.create(team=team, participant=participant)
        created.append(participant)
    return created
