# participants/services.py
import logging

from django.db import transaction
from rest_framework import serializers

from .models import Participant
from .schema import get_registration_schema

logger = logging.getLogger("hackreg.participants")


def register_participant(email: str, fields: dict):
    """
    Create or update the participant for `email` from submitted registration fields.

    `name` and `gender` are read from the fields themselves. Returns
    (participant, created).
    """
    cleaned = get_registration_schema().validate(fields)

    name = cleaned.get("name")
    gender = cleaned.get("gender")
    if not name or not gender:
        raise serializers.ValidationError({"fields": ["Missing required fields: name, gender"]})

    with transaction.atomic():
        participant, created = Participant.objects.select_for_update().get_or_create(
            email=email,
            defaults={"name": name, "gender": gender, "fields": cleaned},
        )
        if not created:
            participant.name = name
            participant.gender = gender
            participant.fields = cleaned
            participant.save(update_fields=["name", "gender", "fields", "updated_at"])

    if created:
        logger.info(f"Participant registered: {email}")
    else:
        logger.info(f"Participant updated registration: {email}")

    return participant, created
