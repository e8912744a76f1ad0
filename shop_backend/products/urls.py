# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register catalog routes under /api/products/
    /api/products/                      (AllowAny read)
    /api/products/{id}/adjust-stock/    (admin)
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from products.views import ProductViewSet

app_name = "products"

router = SimpleRouter()
router.register(r"", ProductViewSet, basename="products")

urlpatterns = [
    path("", include(router.urls)),
]
