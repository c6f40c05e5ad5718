"""
URL mappings for the access backend API.

Paths follow the front-end's ``/api/access/*`` routes.  Trailing slashes
are deliberately omitted.
"""
from django.urls import path, include

from .auth_views import login_view, jwt_refresh_view
from .views import access
from .views import health


urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    # Access grants
    path('api/access/request', access.request_access, name='access_request'),
    path('api/access/verify', access.verify_otp, name='access_verify'),
    path('api/access/requests', access.list_requests, name='access_requests'),
    path('api/access/grant/<str:migrant_id>', access.current_grant, name='access_grant'),
    # Gated record operations
    path('api/access/records/<str:migrant_id>', access.records, name='access_records'),
    path('api/access/health-records/<str:migrant_id>', access.create_record, name='access_create_record'),
    path('api/access/profile/<str:migrant_id>', access.profile, name='access_profile'),
    path('api/access/aisummary/<str:migrant_id>', access.ai_summary, name='access_ai_summary'),
]
