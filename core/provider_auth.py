# core/provider_auth.py
# DRF authentication class for JWTs minted by the sign-in frontend

import logging
import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

logger = logging.getLogger("hackreg.auth")

User = get_user_model()


class ProviderJWTAuthentication(BaseAuthentication):
    """
    Validates HS256 tokens issued by the OAuth sign-in frontend.

    This authenticator:
    1. Extracts the JWT from the Authorization header
    2. Verifies the signature with AUTH_PROVIDER_JWT_SECRET
    3. Looks up or creates a Django user keyed by the `email` claim

    The email claim is trusted verbatim as the participant id.
    """

    def authenticate(self, request):
        auth_header = request.headers.get("Authorization", "")

        if not auth_header.startswith("Bearer "):
            return None  # Let other auth backends handle it

        secret = settings.AUTH_PROVIDER_JWT_SECRET
        if not secret:
            return None

        token = auth_header.split(" ", 1)[1]

        try:
            payload = jwt.decode(token, secret, algorithms=["HS256"])
        except jwt.ExpiredSignatureError:
            raise AuthenticationFailed("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Not a provider token: {e}")
            return None  # SimpleJWT tokens end up here

        email = payload.get("email")
        if not email:
            raise AuthenticationFailed("Token missing email claim")

        user = get_or_create_user_for_email(email, name=payload.get("name"))
        return (user, payload)

    def authenticate_header(self, request):
        return "Bearer"


def get_or_create_user_for_email(email: str, name: str = None):
    """
    Find the Django user for an identity-provider email, creating it on first sign-in.
    """
    try:
        return User.objects.get(email=email)
    except User.DoesNotExist:
        pass

    username = email.split("@")[0]
    # Ensure unique username
    base_username = username
    counter = 1
    while User.objects.filter(username=username).exists():
        username = f"{base_username}_{counter}"
        counter += 1

    first_name = (name or "").strip()[:150]
    user = User.objects.create_user(
        username=username,
        email=email,
        password=None,  # Unusable password; identity comes from the provider
        first_name=first_name,
    )
    logger.info(f"Created new user from identity provider: {email}")
    return user
