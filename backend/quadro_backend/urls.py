# File: backend/quadro_backend/urls.py
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView


def root(_r):
    return JsonResponse({
        "service": "quadro-backoffice",
        "docs": "/api/docs/",
        "health": "/api/v1/core/healthz",
    })


tenant_patterns = [
    path("", include("platformapp.urls")),
    path("", include("identity.urls")),
    path("", include("catalog.urls")),
    path("", include("crm.urls")),
    path("", include("marketing.urls")),
    path("", include("commerce.urls")),
]

urlpatterns = [
    path("admin/", admin.site.urls),

    # API docs
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),

    path("api/v1/core/", include("core.urls")),
    path("api/v1/auth/", include("identity.urls_auth")),
    path("api/v1/", include("platformapp.urls_tenants")),

    # Everything a store owns lives under its tenant id
    path("api/v1/tenants/<uuid:tenant_id>/", include(tenant_patterns)),

    path("", root),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
