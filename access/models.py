"""
Database models for the access backend.

Migrants own health records; doctors (``User`` with role ``doctor``) read
and write them only while they hold a granted :class:`AccessRequest`.
Owner and requester identifiers are stored as plain strings so that the
grant rows form a self-contained, append-only audit trail.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


def _migrant_unique_id() -> str:
    return f"MIG-{uuid.uuid4()}"


class User(AbstractUser):
    """Staff account with a role.

    Doctors are the requesters of access grants; the other roles mirror the
    front-end and carry no extra privileges in the access flow.
    """
    ROLE_CHOICES = [
        ('doctor', 'Doctor'),
        ('worker', 'Health worker'),
        ('admin', 'Administrator'),
        ('employer', 'Employer'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='doctor')
    phone = models.CharField(max_length=20, blank=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Migrant(models.Model):
    """A record owner.  ``unique_id`` is the public identifier printed on the QR card."""
    unique_id = models.CharField(max_length=64, unique=True, default=_migrant_unique_id)
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, unique=True)
    dob = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=20, blank=True)
    language = models.CharField(max_length=10, default='ml')
    is_verified = models.BooleanField(default=False)
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.unique_id})"


class AccessRequest(models.Model):
    """One OTP handshake between a requester and a record owner.

    Status only ever leaves ``pending``; ``granted``, ``denied`` and
    ``expired`` are terminal.  ``otp_code`` is cleared on the way out of
    ``pending``.
    """
    STATUS_PENDING = 'pending'
    STATUS_GRANTED = 'granted'
    STATUS_DENIED = 'denied'
    STATUS_EXPIRED = 'expired'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'pending'),
        (STATUS_GRANTED, 'granted'),
        (STATUS_DENIED, 'denied'),
        (STATUS_EXPIRED, 'expired'),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.CharField(max_length=64, db_index=True)
    requester_id = models.CharField(max_length=64, db_index=True)
    otp_code = models.CharField(max_length=12, blank=True)
    otp_expires_at = models.DateTimeField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    created_at = models.DateTimeField(default=timezone.now)
    verified_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['owner_id', 'requester_id', 'status', 'verified_at'], name='access_req_pair_status_idx'),
        ]

    @property
    def is_pending(self) -> bool:
        return self.status == self.STATUS_PENDING

    def __str__(self) -> str:
        return f"access {self.id} {self.owner_id}<-{self.requester_id} [{self.status}]"


class HealthRecord(models.Model):
    """A note, test result or prescription attached to a migrant."""
    owner_id = models.CharField(max_length=64)
    title = models.CharField(max_length=255)
    content = models.TextField()
    author_id = models.CharField(max_length=64, blank=True)
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=['owner_id', 'created_at'], name='health_rec_owner_created_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.owner_id})"


class AuditEvent(models.Model):
    actor_id = models.CharField(max_length=64, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.actor_id}@{self.created_at:%F %T}"
