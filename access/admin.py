"""
Django admin registrations for the access models.

Access requests are shown read-only: their status is written only by OTP
verification, and rows are never deleted.
"""

from django.contrib import admin

from .models import AccessRequest, AuditEvent, HealthRecord, Migrant, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'first_name', 'last_name')


@admin.register(Migrant)
class MigrantAdmin(admin.ModelAdmin):
    list_display = ('unique_id', 'name', 'phone', 'language', 'is_verified', 'created_at')
    search_fields = ('unique_id', 'name', 'phone')


@admin.register(AccessRequest)
class AccessRequestAdmin(admin.ModelAdmin):
    list_display = ('id', 'owner_id', 'requester_id', 'status', 'otp_expires_at', 'verified_at')
    list_filter = ('status',)
    search_fields = ('owner_id', 'requester_id')
    exclude = ('otp_code',)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(HealthRecord)
class HealthRecordAdmin(admin.ModelAdmin):
    list_display = ('title', 'owner_id', 'author_id', 'created_at')
    search_fields = ('owner_id', 'title')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'actor_id', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
