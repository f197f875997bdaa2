"""
URL configuration for the rent cycle service.

Admin, the background-job API, health and Prometheus metrics.
"""
from django.conf import settings
from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView


def health_view(_request):
    return JsonResponse({
        'status': 'ok',
        'app': 'rentcycle',
        'debug': settings.DEBUG,
    })


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/jobs/', include('jobs.urls')),
    # OpenAPI schema & docs
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    # Health & Metrics
    path('health/', health_view),
    path('', include('django_prometheus.urls')),  # exposes /metrics
]
