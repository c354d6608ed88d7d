# Routes nested under /api/v1/tenants/<tenant_id>/
from rest_framework.routers import SimpleRouter
from .views import DiscountViewSet

router = SimpleRouter(trailing_slash=False)
router.register(r"discounts", DiscountViewSet, basename="discount")

urlpatterns = router.urls
