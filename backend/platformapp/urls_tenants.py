from rest_framework.routers import SimpleRouter
from .views import TenantViewSet

router = SimpleRouter(trailing_slash=False)
router.register(r"tenants", TenantViewSet, basename="tenant")

urlpatterns = router.urls
