# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Public catalog browsing (AllowAny): list + retrieve of ACTIVE products
- Admin catalog management: create / update / delete
- Admin stock adjustments through the catalog service (never raw writes)

Filtering:
- ?category=Laptops&brand=Apple&is_featured=true (django-filter)
- ?q=<text> matches name / brand / description
"""

from django.db.models import Q
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_CATALOG_EDIT, HasCapability, is_admin
from products.models import Product
from products.serializers import ProductSerializer, StockAdjustmentSerializer
from products.services import catalog
from products.services.catalog import InsufficientStockError, ProductNotFoundError


def error_response(*, code: str, message: str, http_status: int):
    """
    Canonical API error response.
    """
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


class ProductViewSet(viewsets.ModelViewSet):
    """
    Product endpoints.

    Public:
    - GET /api/products/
    - GET /api/products/{id}/

    Admin (catalog.edit):
    - POST / PUT / PATCH / DELETE
    - POST /api/products/{id}/adjust-stock/  {"delta": <int>}
    """

    serializer_class = ProductSerializer
    filterset_fields = ["category", "brand", "is_featured"]

    required_capability = None

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [AllowAny()]

        self.required_capability = CAP_CATALOG_EDIT
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = Product.objects.all().order_by("-created_at")

        # Inactive products stay visible to admins only
        if not is_admin(self.request.user):
            qs = qs.filter(is_active=True)

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(
                Q(name__icontains=q)
                | Q(brand__icontains=q)
                | Q(description__icontains=q)
            )

        return qs

    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="q",
                type=str,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Optional search across name, brand and description.",
            ),
        ],
        responses={200: ProductSerializer(many=True)},
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    # -----------------------------
    # Admin stock adjustment
    # -----------------------------
    @extend_schema(
        request=StockAdjustmentSerializer,
        responses={
            200: ProductSerializer,
            404: OpenApiResponse(description="Product not found"),
            409: OpenApiResponse(description="Adjustment would make stock negative"),
        },
        description="Apply a signed delta to a product's stock counter.",
    )
    @action(detail=True, methods=["post"], url_path="adjust-stock")
    def adjust_stock(self, request, pk=None):
        command = StockAdjustmentSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        product = self.get_object()

        try:
            catalog.adjust_stock(product.pk, command.validated_data["delta"])
        except ProductNotFoundError as exc:
            return error_response(
                code="NOT_FOUND",
                message=str(exc),
                http_status=status.HTTP_404_NOT_FOUND,
            )
        except InsufficientStockError as exc:
            return error_response(
                code="INSUFFICIENT_STOCK",
                message=str(exc),
                http_status=status.HTTP_409_CONFLICT,
            )

        product.refresh_from_db()
        return Response(ProductSerializer(product).data, status=status.HTTP_200_OK)
