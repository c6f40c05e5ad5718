from rest_framework import serializers


class AccessRequestCreateSerializer(serializers.Serializer):
    migrantId = serializers.CharField(max_length=64)

    def validate_migrantId(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('migrantId is required')
        return v


class OtpVerifySerializer(serializers.Serializer):
    requestId = serializers.UUIDField()
    otp = serializers.CharField(max_length=12)


class AccessRequestListQuerySerializer(serializers.Serializer):
    migrantId = serializers.CharField(max_length=64, required=False)
    status = serializers.ChoiceField(choices=['pending', 'granted', 'denied', 'expired'], required=False)


class HealthRecordCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    content = serializers.CharField(max_length=20000, required=False, allow_blank=True)


def format_access_request(ar) -> dict:
    """Public view of an access request; the OTP code is never included."""
    return {
        'requestId': str(ar.id),
        'migrantId': ar.owner_id,
        'requesterId': ar.requester_id,
        'status': ar.status,
        'otpExpiresAt': ar.otp_expires_at.isoformat() if ar.otp_expires_at else None,
        'createdAt': ar.created_at.isoformat() if ar.created_at else None,
        'verifiedAt': ar.verified_at.isoformat() if ar.verified_at else None,
    }


def format_record(r) -> dict:
    return {
        'id': r.id,
        'migrantId': r.owner_id,
        'title': r.title,
        'content': r.content,
        'createdBy': r.author_id,
        'createdAt': r.created_at.isoformat(),
        'version': r.version,
    }
