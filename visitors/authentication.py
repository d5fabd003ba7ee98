"""
Authentication classes for the REST API.

Both the legacy ``Token`` header and simplejwt bearer tokens are
accepted.  Either way, staff and patients of a hospital that has been
deactivated or soft-deleted are refused.  Keeping these classes apart
from the views avoids circular imports when the REST framework loads
authentication classes during initialization.
"""
from __future__ import annotations

from rest_framework import authentication, exceptions
from rest_framework_simplejwt.authentication import JWTAuthentication as BaseJWTAuthentication


def ensure_hospital_active(user):
    hospital = getattr(user, 'hospital', None)
    if hospital is not None and (not hospital.is_active or hospital.deleted_at is not None):
        raise exceptions.AuthenticationFailed('Hospital is inactive')
    return user


class TokenAuthentication(authentication.TokenAuthentication):
    """Token authentication using the ``Token`` keyword."""

    keyword = 'Token'

    def authenticate_credentials(self, key):
        user, token = super().authenticate_credentials(key)
        return ensure_hospital_active(user), token


class JWTAuthentication(BaseJWTAuthentication):
    def get_user(self, validated_token):
        return ensure_hospital_active(super().get_user(validated_token))
