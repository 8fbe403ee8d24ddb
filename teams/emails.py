# teams/emails.py
from django.conf import settings
from django.core.mail import send_mail

from .rules import MAX_TEAM_SIZE


def send_connection_request_email(connection):
    """
    Tell the recipient of a connection request who wants to team up with them.
    """
    details = connection.from_user_details or {}
    skills = details.get("skills") or []

    lines = [
        f"Hello {connection.to_name},",
        "",
        f"{connection.from_name} is interested in teaming up with you for {settings.HACKATHON_NAME}.",
        "",
        "Their details:",
        f"  Name: {connection.from_name}",
        f"  Email: {connection.from_email}",
        f"  Department: {details.get('department') or 'N/A'}",
        f"  Year: {details.get('year') or 'N/A'}",
        f"  Phone: {details.get('phone') or 'N/A'}",
    ]
    if skills:
        lines.append(f"  Skills: {', '.join(skills)}")
    lines += [
        "",
        "If you're interested, reach out to them directly using the contact information above.",
        f"Remember, teams need exactly {MAX_TEAM_SIZE} members with at least 1 female member.",
    ]

    send_mail(
        subject=f"Team-up request from {connection.from_name} - {settings.HACKATHON_NAME}",
        message="\n".join(lines),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[connection.to_email],
        fail_silently=False,
    )


def send_join_request_email(join_request, leader):
    """
    Let the team leader know a join request is waiting for them.
    """
    details = join_request.user_details or {}
    message = (
        f"Hi {leader.name},\n\n"
        f"{join_request.user_name} ({join_request.user_email}) asked to join {join_request.team_name}.\n"
        f"Department: {details.get('department') or 'N/A'}\n"
        f"Year: {details.get('year') or 'N/A'}\n\n"
        f"Open the team management page to accept or reject the request."
    )
    send_mail(
        subject=f"New join request for {join_request.team_name}",
        message=message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[leader.email],
        fail_silently=False,
    )
