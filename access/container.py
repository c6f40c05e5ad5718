"""
Builds the access services from settings.

Views call these factories per request, so every service instance owns its
collaborators explicitly and nothing is shared at module scope.
"""
from __future__ import annotations

from datetime import timedelta

from django.conf import settings

from access.services.directory import MigrantDirectory
from access.services.gateway import RecordGateway
from access.services.grants import AccessGrantService
from access.services.notifications import LogNotifier, Notifier, TwilioSmsNotifier
from access.services.otp import OtpGenerator
from access.services.stores import DjangoAccessRequestStore, DjangoRecordStore
from access.services.summarizer import GeminiSummarizer


def build_notifier() -> Notifier:
    if not settings.TWILIO_SID:
        return LogNotifier()
    return TwilioSmsNotifier(
        settings.TWILIO_SID, settings.TWILIO_TOKEN, settings.TWILIO_FROM,
        timeout=settings.TWILIO_TIMEOUT,
    )


def build_summarizer() -> GeminiSummarizer:
    return GeminiSummarizer(settings.GEMINI_KEY, model=settings.GEMINI_MODEL, timeout=settings.GEMINI_TIMEOUT)


def build_access_service() -> AccessGrantService:
    return AccessGrantService(
        DjangoAccessRequestStore(),
        MigrantDirectory(),
        build_notifier(),
        OtpGenerator(ttl=timedelta(minutes=settings.ACCESS_OTP_TTL_MINUTES)),
    )


def build_record_gateway(grants: AccessGrantService | None = None) -> RecordGateway:
    return RecordGateway(
        grants or build_access_service(),
        DjangoRecordStore(),
        MigrantDirectory(),
        build_summarizer(),
        summary_limit=settings.SUMMARY_MAX_RECORDS,
    )
