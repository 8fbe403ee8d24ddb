# participants/models.py
from django.db import models


class Participant(models.Model):
    """
    A registered hackathon participant.

    `email` is the participant id everywhere (join requests, team membership,
    exports). Team membership is never stored here; it is derived from
    teams.TeamMember on read.
    """
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255)
    gender = models.CharField(max_length=32, help_text="Free text, compared case-insensitively")

    # Values validated against the registration schema (phone, college, skills, ...)
    fields = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.name} <{self.email}>"

    @property
    def user_id(self):
        return self.email

    def snapshot(self):
        """
        Details copied onto join/connection requests at request time.
        """
        fields = self.fields or {}
        skills = fields.get("skills") or []
        if isinstance(skills, str):
            skills = [s.strip() for s in skills.split(",") if s.strip()]
        return {
            "department": fields.get("department"),
            "year": fields.get("year"),
            "phone": fields.get("phone"),
            "skills": skills,
        }
