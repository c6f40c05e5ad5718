"""
Bearer JWT authentication for the access API.

Login stamps the user's role into the token.  A token whose role claim no
longer matches the stored account (the role was changed after login) is
refused, so callers re-authenticate instead of acting under a stale role.
"""
from __future__ import annotations

from rest_framework_simplejwt import authentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed


class JWTAuthentication(authentication.JWTAuthentication):

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        claimed = validated_token.get('role')
        if claimed is not None and claimed != getattr(user, 'role', None):
            raise AuthenticationFailed('role changed since login', code='role_changed')
        return user
