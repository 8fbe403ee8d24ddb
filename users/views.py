# users/views.py - Sign-in exchange + current user

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from core.provider_auth import get_or_create_user_for_email
from .serializers import UserSerializer

logger = logging.getLogger("hackreg.auth")

User = get_user_model()


class UserViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Users can only see themselves.
    """
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        if self.action == 'list':
            return User.objects.none()
        return User.objects.filter(pk=self.request.user.pk)

    @action(detail=False, methods=['get'])
    def me(self, request):
        """
        GET /api/users/me/
        Return current user info
        """
        serializer = self.get_serializer(request.user)
        return Response(serializer.data)


class GoogleLoginView(APIView):
    """
    POST /api/users/google/
    Body: {"id_token": "<google id token>"}

    Exchanges a Google ID token for API tokens. The verified email becomes
    the participant id.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def verify(self, token):
        # Audience is enforced once GOOGLE_CLIENT_ID is configured
        audience = settings.GOOGLE_CLIENT_ID or None
        return id_token.verify_oauth2_token(token, google_requests.Request(), audience)

    def post(self, request):
        if not isinstance(request.data, dict):
            raise ValidationError({'id_token': ['ID Token is required']})
        token = request.data.get('id_token')
        if not token:
            raise ValidationError({'id_token': ['ID Token is required']})

        try:
            id_info = self.verify(token)
        except ValueError as e:
            logger.info(f"Rejected Google token: {e}")
            raise ValidationError({'id_token': [f'Invalid token: {e}']})

        email = id_info.get('email')
        if not email or not id_info.get('email_verified', False):
            raise ValidationError({'id_token': ['Verified email not found in token']})

        user = get_or_create_user_for_email(email, name=id_info.get('name'))

        refresh = RefreshToken.for_user(user)

        return Response({
            'refresh': str(refresh),
            'access': str(refresh.access_token),
            'user': UserSerializer(user).data,
        })
