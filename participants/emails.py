# participants/emails.py
from django.conf import settings
from django.core.mail import send_mail


def send_registration_email(participant):
    """
    Registration confirmation. Callers treat failures as non-critical.
    """
    subject = f"{settings.HACKATHON_NAME} - Registration Confirmed"
    message = (
        f"Hi {participant.name},\n\n"
        f"Your registration for {settings.HACKATHON_NAME} is confirmed.\n\n"
        f"Next step: create a team or join one with an invite code.\n"
        f"Teams need 6 members, including at least 1 female member.\n\n"
        f"We will share updates and announcements via email.\n"
        f"Thank you and good luck!\n\n"
        f"Organizing Team"
    )

    send_mail(
        subject=subject,
        message=message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[participant.email],
        fail_silently=False,
    )
