# Routes nested under /api/v1/tenants/<tenant_id>/
from rest_framework.routers import SimpleRouter
from .views import CustomerViewSet

router = SimpleRouter(trailing_slash=False)
router.register(r"customers", CustomerViewSet, basename="customer")

urlpatterns = router.urls
