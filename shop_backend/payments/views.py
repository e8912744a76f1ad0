# payments/views.py

"""
SIMULATED PAYMENT ENDPOINTS

- GET  /api/payments/config/         (AllowAny)
- POST /api/payments/create-intent/  {amount}
- POST /api/payments/confirm/        {payment_intent_id}
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from payments.services.simulated import (
    PaymentError,
    confirm_payment,
    create_payment_intent,
    payment_config,
)


def error_response(*, code: str, message: str, http_status: int):
    """
    Canonical API error response.
    """
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


class CreateIntentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class ConfirmSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField(max_length=128)


class PaymentConfigView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(responses={200: OpenApiResponse(description="Checkout client config")})
    def get(self, request):
        return Response(payment_config(), status=status.HTTP_200_OK)


class CreatePaymentIntentView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=CreateIntentSerializer,
        responses={
            200: OpenApiResponse(description="Simulated payment intent"),
            400: OpenApiResponse(description="Invalid amount"),
        },
    )
    def post(self, request):
        serializer = CreateIntentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            intent = create_payment_intent(amount=serializer.validated_data["amount"])
        except PaymentError as exc:
            return error_response(
                code="INVALID_AMOUNT",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(intent, status=status.HTTP_200_OK)


class ConfirmPaymentView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=ConfirmSerializer,
        responses={
            200: OpenApiResponse(description="Simulated confirmation"),
            400: OpenApiResponse(description="Invalid payment intent ID"),
        },
    )
    def post(self, request):
        serializer = ConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = confirm_payment(
                payment_intent_id=serializer.validated_data["payment_intent_id"]
            )
        except PaymentError as exc:
            return error_response(
                code="INVALID_PAYMENT_INTENT",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(result, status=status.HTTP_200_OK)
