"""
URL configuration for the retail POS platform.
"""

from django.contrib import admin
from django.urls import include, path

from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("", include("apps.inventory.urls")),
    path("", include("apps.sales.urls")),
    path("", include("django_prometheus.urls")),  # Prometheus metrics endpoint at /metrics
]
