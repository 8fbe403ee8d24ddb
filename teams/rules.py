# teams/rules.py
"""
Pure team-composition rules: team size, the gender-balance check and invite codes.
"""
import secrets

MAX_TEAM_SIZE = 6
FEMALE = "female"

# No I, O, 0 or 1 (easy to misread when shared)
INVITE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_CODE_LENGTH = 6


def normalize_gender(gender) -> str:
    return (gender or "").strip().lower()


def is_female(gender) -> bool:
    return normalize_gender(gender) == FEMALE


def can_join_preserving_female_requirement(current_genders, joining_gender, max_size=MAX_TEAM_SIZE) -> bool:
    """
    Whether one more member with `joining_gender` may join a team whose
    members have `current_genders`.

    Only the last slot is gated: it must go to a female unless the team
    already has one. Earlier slots are always open, so a team can sit at
    max_size - 1 members if no female ever joins.
    """
    size = len(current_genders)

    if size < max_size - 1:
        return True

    if size == max_size - 1:
        if any(is_female(g) for g in current_genders):
            return True
        return is_female(joining_gender)

    return False


def generate_invite_code(length=INVITE_CODE_LENGTH) -> str:
    # Uniqueness is the database's job; see services.create_team
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


def normalize_invite_code(code) -> str:
    if not isinstance(code, str):
        return ""
    return code.strip().upper()
