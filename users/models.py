# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Sign-in identity. The email is the participant id used across the
    hackathon apps, so it is unique here.
    """
    email = models.EmailField(unique=True)

    def __str__(self):
        return self.email or self.username
