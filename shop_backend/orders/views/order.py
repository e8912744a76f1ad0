# orders/views/order.py

"""
ORDER VIEWSET

Thin HTTP layer over orders.services.order_service:
- validates input with command serializers
- calls exactly one service operation
- renders domain errors through the canonical error envelope

Routes (all under /api/orders/):
- POST   /                       create order (customer)
- GET    /                       list all orders (admin)
- GET    /mine/                  list own orders
- GET    /{id}/                  order detail (owner or admin)
- POST   /{id}/pay/              confirm payment (owner or admin)
- POST   /{id}/status/           admin status override
- POST   /{id}/cancel/           hybrid cancel (owner only)
- POST   /{id}/approve-cancel/   approve pending cancel request (admin)
- POST   /{id}/reject-cancel/    reject pending cancel request (admin)
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema, inline_serializer
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from orders.serializers import (
    OrderCancelCommandSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    OrderStatusCommandSerializer,
    PaymentReferenceSerializer,
)
from orders.services import order_service
from orders.services.exceptions import OrderError
from permissions.roles import (
    CAP_ORDERS_DECIDE_CANCEL,
    CAP_ORDERS_FULFIL,
    CAP_ORDERS_PLACE,
    CAP_ORDERS_VIEW_ALL,
    HasCapability,
)


# ======================================================
# API ERROR NORMALIZATION
# ======================================================

def error_response(*, code: str, message: str, http_status: int, current_status=None):
    """
    Canonical API error response.

    Transition rejections also carry the order's current_status.
    """
    body = {"code": code, "message": message}
    if current_status is not None:
        body["current_status"] = str(current_status)
    return Response({"error": body}, status=http_status)


def domain_error_response(exc: OrderError):
    return error_response(
        code=exc.code,
        message=str(exc),
        http_status=exc.http_status,
        current_status=getattr(exc, "current_status", None),
    )


ERROR_RESPONSES = {
    400: OpenApiResponse(description="Validation error or invalid transition"),
    403: OpenApiResponse(description="Caller may not act on this order"),
    404: OpenApiResponse(description="Order not found"),
}

CancelResponseSerializer = inline_serializer(
    name="OrderCancelResponse",
    fields={
        "message": serializers.CharField(),
        "direct_cancel": serializers.BooleanField(),
        "requires_approval": serializers.BooleanField(),
        "order": OrderSerializer(),
    },
)

DecisionResponseSerializer = inline_serializer(
    name="OrderCancelDecisionResponse",
    fields={
        "message": serializers.CharField(),
        "order": OrderSerializer(),
    },
)


# ======================================================
# ORDER VIEWSET
# ======================================================

class OrderViewSet(viewsets.GenericViewSet):
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]

    # Capability hooks used by HasCapability
    required_capability = None

    ACTION_CAPABILITIES = {
        "create": CAP_ORDERS_PLACE,
        "list": CAP_ORDERS_VIEW_ALL,
        "set_status": CAP_ORDERS_FULFIL,
        "approve_cancel": CAP_ORDERS_DECIDE_CANCEL,
        "reject_cancel": CAP_ORDERS_DECIDE_CANCEL,
    }

    def get_permissions(self):
        """
        Action-specific permissions.

        - capability-gated actions use HasCapability
        - owner checks (detail, pay, cancel) are enforced by the order service
        """
        capability = self.ACTION_CAPABILITIES.get(self.action)
        if capability:
            self.required_capability = capability
            return [IsAuthenticated(), HasCapability()]
        return [IsAuthenticated()]

    def get_serializer_class(self):
        if self.action == "create":
            return OrderCreateSerializer
        if self.action == "pay":
            return PaymentReferenceSerializer
        if self.action == "set_status":
            return OrderStatusCommandSerializer
        if self.action == "cancel":
            return OrderCancelCommandSerializer
        return OrderSerializer

    def get_queryset(self):
        return order_service.list_all_orders()

    # --------------------------------------------------
    # CREATE
    # --------------------------------------------------

    @extend_schema(
        request=OrderCreateSerializer,
        responses={
            201: OrderSerializer,
            409: OpenApiResponse(description="Insufficient stock"),
            **ERROR_RESPONSES,
        },
    )
    def create(self, request):
        command = OrderCreateSerializer(data=request.data)
        command.is_valid(raise_exception=True)
        data = command.validated_data

        try:
            order = order_service.create_order(
                owner=request.user,
                line_items=[dict(item) for item in data["items"]],
                shipping_address=dict(data["shipping_address"]),
                amounts={
                    "items_total": data["items_total"],
                    "tax": data["tax"],
                    "shipping": data["shipping"],
                    "grand_total": data["grand_total"],
                },
            )
        except OrderError as exc:
            return domain_error_response(exc)

        order = order_service.get_order(order_id=order.id, caller=request.user)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # --------------------------------------------------
    # READS
    # --------------------------------------------------

    @extend_schema(responses={200: OrderSerializer(many=True)})
    def list(self, request):
        orders = order_service.list_all_orders()
        return Response(OrderSerializer(orders, many=True).data)

    @extend_schema(responses={200: OrderSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="mine")
    def mine(self, request):
        orders = order_service.list_own_orders(owner=request.user)
        return Response(OrderSerializer(orders, many=True).data)

    @extend_schema(responses={200: OrderSerializer, **ERROR_RESPONSES})
    def retrieve(self, request, pk=None):
        try:
            order = order_service.get_order(order_id=pk, caller=request.user)
        except OrderError as exc:
            return domain_error_response(exc)

        return Response(OrderSerializer(order).data)

    # --------------------------------------------------
    # PAYMENT
    # --------------------------------------------------

    @extend_schema(
        request=PaymentReferenceSerializer,
        responses={200: OrderSerializer, **ERROR_RESPONSES},
    )
    @action(detail=True, methods=["post"], url_path="pay")
    def pay(self, request, pk=None):
        command = PaymentReferenceSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            # owner or admin
            order_service.get_order(order_id=pk, caller=request.user)
            order = order_service.mark_paid(
                order_id=pk,
                payment_reference=dict(command.validated_data),
            )
        except OrderError as exc:
            return domain_error_response(exc)

        return Response(OrderSerializer(order).data)

    # --------------------------------------------------
    # ADMIN STATUS OVERRIDE
    # --------------------------------------------------

    @extend_schema(
        request=OrderStatusCommandSerializer,
        responses={200: OrderSerializer, **ERROR_RESPONSES},
    )
    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        command = OrderStatusCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            order = order_service.set_status(
                order_id=pk,
                status=command.validated_data["status"],
            )
        except OrderError as exc:
            return domain_error_response(exc)

        return Response(OrderSerializer(order).data)

    # --------------------------------------------------
    # CANCELLATION
    # --------------------------------------------------

    @extend_schema(
        request=OrderCancelCommandSerializer,
        responses={200: CancelResponseSerializer, **ERROR_RESPONSES},
    )
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        command = OrderCancelCommandSerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            result = order_service.request_cancel(
                order_id=pk,
                caller=request.user,
                reason=command.validated_data.get("reason"),
            )
        except OrderError as exc:
            return domain_error_response(exc)

        if result.direct_cancel:
            message = "Order cancelled successfully"
        else:
            message = "Cancellation request sent to admin for approval"

        return Response(
            {
                "message": message,
                "direct_cancel": result.direct_cancel,
                "requires_approval": not result.direct_cancel,
                "order": OrderSerializer(result.order).data,
            }
        )

    @extend_schema(request=None, responses={200: DecisionResponseSerializer, **ERROR_RESPONSES})
    @action(detail=True, methods=["post"], url_path="approve-cancel")
    def approve_cancel(self, request, pk=None):
        try:
            order = order_service.approve_cancel_request(order_id=pk)
        except OrderError as exc:
            return domain_error_response(exc)

        return Response(
            {
                "message": "Cancel request approved. Order cancelled successfully",
                "order": OrderSerializer(order).data,
            }
        )

    @extend_schema(request=None, responses={200: DecisionResponseSerializer, **ERROR_RESPONSES})
    @action(detail=True, methods=["post"], url_path="reject-cancel")
    def reject_cancel(self, request, pk=None):
        try:
            order = order_service.reject_cancel_request(order_id=pk)
        except OrderError as exc:
            return domain_error_response(exc)

        return Response(
            {
                "message": "Cancel request rejected. Order will continue processing",
                "order": OrderSerializer(order).data,
            }
        )
