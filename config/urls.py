"""URL configuration for Marina CRM project.

The `urlpatterns` list routes URLs to views. It includes both Django admin
and application‑level routers provided by Django Rest Framework and each app.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

from apps.core.views import HealthCheckView

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', HealthCheckView.as_view(), name='health'),
    # Application URLs
    path('api/v1/auth/', include(('apps.users.auth_urls', 'auth'), namespace='auth')),
    path('api/v1/users/', include('apps.users.urls')),
    path('api/v1/', include('apps.clubs.urls')),
    path('api/v1/vessels/', include('apps.vessels.urls')),
    path('api/v1/', include('apps.tariffs.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/', include('apps.finances.urls')),
    path('api/v1/activity-logs/', include('apps.activity_logs.urls')),
    # OpenAPI
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
