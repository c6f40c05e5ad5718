"""
OTP access-grant endpoints.

A doctor opens a request for a migrant, the migrant reads the OTP from
their phone, and the doctor submits it.  Once granted, the doctor can read
and add health records, view the migrant's profile and ask for an AI
summary.  Domain errors propagate to ``access.exceptions`` which renders
them as ``{'ok': False, 'error': {...}}``.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from access import container
from access.errors import AccessError
from access.identity import identity_from_request
from access.serializers.access import (
    AccessRequestCreateSerializer,
    AccessRequestListQuerySerializer,
    HealthRecordCreateSerializer,
    OtpVerifySerializer,
    format_access_request,
    format_record,
)
from access.services.audit import log_action
from access.throttling import OtpVerifyRateThrottle


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def request_access(request):
    """Open a pending access request and send the OTP to the migrant's phone."""
    s = AccessRequestCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    caller = identity_from_request(request)
    ar = container.build_access_service().request_access(s.validated_data['migrantId'], caller.id)
    log_action(actor_id=caller.id, action='access_request', object_type='access_request', object_id=ar.id,
               detail={'migrantId': ar.owner_id})
    return Response({
        'ok': True,
        'requestId': str(ar.id),
        'status': ar.status,
        'otpExpiresAt': ar.otp_expires_at.isoformat(),
        'message': 'OTP sent to migrant phone',
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([OtpVerifyRateThrottle])
def verify_otp(request):
    s = OtpVerifySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    caller = identity_from_request(request)
    request_id = s.validated_data['requestId']
    try:
        ar = container.build_access_service().verify_otp(request_id, s.validated_data['otp'])
    except AccessError as e:
        log_action(actor_id=caller.id, action='access_verify', object_type='access_request',
                   object_id=request_id, detail={'result': e.code})
        raise
    log_action(actor_id=caller.id, action='access_verify', object_type='access_request', object_id=ar.id,
               detail={'result': 'granted'})
    return Response({'ok': True, 'message': 'access granted', 'data': format_access_request(ar)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def current_grant(request, migrant_id):
    caller = identity_from_request(request)
    ar = container.build_access_service().current_grant(migrant_id, caller.id)
    return Response({'ok': True, 'granted': ar is not None, 'data': format_access_request(ar) if ar else None})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_requests(request):
    """The caller's own access requests, newest first."""
    q = AccessRequestListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    caller = identity_from_request(request)
    rows = container.build_access_service().requests_for(
        caller.id,
        owner_id=q.validated_data.get('migrantId'),
        status=q.validated_data.get('status'),
    )
    return Response({'ok': True, 'data': [format_access_request(ar) for ar in rows]})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def records(request, migrant_id):
    caller = identity_from_request(request)
    items = container.build_record_gateway().read_records(migrant_id, caller.id)
    return Response({'ok': True, 'records': [format_record(r) for r in items]})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_record(request, migrant_id):
    s = HealthRecordCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    caller = identity_from_request(request)
    record = container.build_record_gateway().write_record(
        migrant_id, caller.id,
        s.validated_data.get('title', ''),
        s.validated_data.get('content', ''),
    )
    log_action(actor_id=caller.id, action='record_create', object_type='health_record', object_id=record.id,
               detail={'migrantId': migrant_id})
    return Response({'ok': True, 'message': 'record created successfully', 'record': format_record(record)}, status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def profile(request, migrant_id):
    caller = identity_from_request(request)
    p = container.build_record_gateway().read_owner_profile(migrant_id, caller.id)
    return Response({'ok': True, 'migrant': p.as_dict()})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def ai_summary(request, migrant_id):
    caller = identity_from_request(request)
    summary = container.build_record_gateway().summarize(migrant_id, caller.id)
    return Response({'ok': True, 'summary': summary})
