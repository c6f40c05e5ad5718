"""
Authentication views.

Staff log in with username/password and receive a JWT pair.  The access
token is the opaque caller identity every access endpoint consumes; this
module does not create accounts.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from access.serializers.auth import LoginSerializer
from access.services.audit import log_action
from access.throttling import LoginRateThrottle

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    """Username/password login.  The role always comes from the stored user."""
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']
    password = s.validated_data['password']

    user = authenticate(request, username=username, password=password)
    if not user:
        log_action(actor_id=None, action='login', object_type='user',
                   detail={'result': 'fail', 'username': username, 'ip': request.META.get('REMOTE_ADDR')})
        logger.info("Failed login for %s", username)
        return Response({'ok': False, 'error': {'code': 'invalid_credentials', 'message': 'invalid credentials'}},
                        status=401)

    log_action(actor_id=user.pk, action='login', object_type='user', object_id=user.pk,
               detail={'result': 'ok', 'ip': request.META.get('REMOTE_ADDR')})

    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role

    return Response({
        'ok': True,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'user': {
            'id': user.id,
            'username': user.username,
            'name': user.get_full_name() or user.username,
            'role': user.role,
        },
    }, status=200)


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from refresh token."""
    view = TokenRefreshView.as_view()
    resp = view(request._request)
    if isinstance(resp, Response):
        data = dict(resp.data)
        if 'access' in data and 'jwt_access' not in data:
            data['jwt_access'] = data.pop('access')
        return Response(data, status=resp.status_code)
    return resp
