# Routes nested under /api/v1/tenants/<tenant_id>/
from rest_framework.routers import SimpleRouter
from .views import OrderViewSet

router = SimpleRouter(trailing_slash=False)
router.register(r"orders", OrderViewSet, basename="order")

urlpatterns = router.urls
