import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import HasParticipantIdentity
from .emails import send_registration_email
from .models import Participant
from .schema import get_registration_schema
from .serializers import ParticipantSerializer
from .services import register_participant

logger = logging.getLogger("hackreg.participants")


class RegistrationSchemaView(APIView):
    """
    GET /api/participants/schema/
    The registration questions the frontend renders.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        return Response(get_registration_schema().as_dict())


class ParticipantMeView(APIView):
    """
    GET  /api/participants/me/   -> current registration (or null)
    POST /api/participants/me/   -> create/update registration
         Body: {"fields": {"name": "...", "gender": "...", ...}}
    """
    permission_classes = [IsAuthenticated, HasParticipantIdentity]

    def get(self, request):
        participant = Participant.objects.filter(email=request.user.email).first()
        return Response({
            "participant": ParticipantSerializer(participant).data if participant else None,
            "session_user": {
                "email": request.user.email,
                "name": request.user.get_full_name() or request.user.username,
            },
        })

    def post(self, request):
        if not isinstance(request.data, dict):
            raise ValidationError({"fields": ["Invalid payload"]})
        fields = request.data.get("fields")
        if not isinstance(fields, dict):
            raise ValidationError({"fields": ["Invalid payload"]})

        participant, created = register_participant(request.user.email, fields)

        if not created:
            return Response({"ok": True, "updated": True})

        # Send email outside the write (non-critical)
        try:
            send_registration_email(participant)
        except Exception as e:
            logger.warning(f"Failed to send registration email to {participant.email}: {e}")

        return Response({"ok": True, "created": True}, status=status.HTTP_201_CREATED)
