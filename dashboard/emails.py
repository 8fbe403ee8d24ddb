# dashboard/emails.py
from django.conf import settings
from django.core.mail import EmailMessage, get_connection


def send_broadcast_email(recipients, subject, message):
    """
    One message to every recipient, all in BCC so addresses stay private.
    Returns the number of messages sent (0 or 1).
    """
    if not recipients:
        return 0

    connection = get_connection(fail_silently=False)
    email = EmailMessage(
        subject=subject,
        body=message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        bcc=list(recipients),
        connection=connection,
    )
    return email.send()
