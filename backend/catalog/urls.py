# Routes nested under /api/v1/tenants/<tenant_id>/
from rest_framework.routers import SimpleRouter
from .views import CategoryViewSet, ProductViewSet

router = SimpleRouter(trailing_slash=False)
router.register(r"catalog/categories", CategoryViewSet, basename="category")
router.register(r"catalog/products", ProductViewSet, basename="product")

urlpatterns = router.urls
