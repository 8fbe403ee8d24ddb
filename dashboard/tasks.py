# dashboard/tasks.py
import logging

from celery import shared_task

from participants.models import Participant
from .emails import send_broadcast_email

logger = logging.getLogger("hackreg.dashboard")


def broadcast_recipients():
    return list(
        Participant.objects.exclude(email="").order_by("created_at").values_list("email", flat=True)
    )


@shared_task(bind=True, max_retries=3)
def send_broadcast_email_task(self, subject: str, message: str):
    """
    Send an organizer announcement to every registered participant.
    Recipients are read when the task runs, not when it was queued.
    """
    recipients = broadcast_recipients()
    if not recipients:
        logger.info("Broadcast skipped: no recipients")
        return 0

    try:
        send_broadcast_email(recipients, subject, message)
    except Exception as exc:
        logger.error(f"Broadcast '{subject}' failed: {exc}")
        raise self.retry(exc=exc, countdown=60)

    logger.info(f"Broadcast '{subject}' sent to {len(recipients)} participants")
    return len(recipients)
