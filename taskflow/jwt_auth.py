"""
JWT authentication that reads the access token from a cookie.

The browser front end keeps the access token in an HttpOnly cookie; API
clients and tests can still send it in the Authorization header.
"""

from django.conf import settings
from django.http import HttpRequest
from rest_framework_simplejwt.authentication import JWTAuthentication
from typing import Optional, Tuple


class CookieJWTAuthentication(JWTAuthentication):
    """
    Authenticate from the ``AUTH_COOKIE_NAME`` cookie, falling back to the
    Authorization header when the cookie is absent.
    """

    def authenticate(self, request: HttpRequest) -> Optional[Tuple]:
        """
        Args:
            request: The HTTP request

        Returns:
            A tuple of (user, validated_token) if authentication succeeds
            None if no credentials are provided
            Raises AuthenticationFailed if credentials are invalid
        """
        cookie_name = getattr(settings, 'AUTH_COOKIE_NAME', 'access_token')
        access_token = request.COOKIES.get(cookie_name)

        if access_token is None:
            return super().authenticate(request)

        validated_token = self.get_validated_token(access_token)
        return self.get_user(validated_token), validated_token

    def authenticate_header(self, request: HttpRequest) -> str:
        return 'Bearer'
