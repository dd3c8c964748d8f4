"""
Order views.

Endpoints:
    POST /api/v1/orders/checkout/stripe/         - Start Stripe checkout
    POST /api/v1/orders/checkout/square/         - Start Square checkout
    GET  /api/v1/orders/                         - Current user's orders
    GET  /api/v1/orders/admin/                   - All orders (admin)
    POST /api/v1/orders/admin/{id}/status/       - Refund or override (admin)
"""

import logging

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsStaffUser
from orders.exceptions import CheckoutValidationError
from orders.models import Order
from orders.serializers import (
    AdminOrderSerializer,
    CheckoutRequestSerializer,
    CheckoutResponseSerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
)
from orders.services import CheckoutService, OrderLifecycleService
from orders.state_machines import OrderStatus
from payments.exceptions import InvalidStateTransitionError, PaymentProcessingError

logger = logging.getLogger(__name__)


class BaseCheckoutView(APIView):
    """
    Shared request handling for provider checkouts.

    Subclasses implement ``start_checkout`` with a CheckoutService method.
    """

    permission_classes = [IsAuthenticated]

    def start_checkout(self, **kwargs):
        raise NotImplementedError

    def post(self, request):
        serializer = CheckoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = self.start_checkout(
                user=request.user,
                items=data["items"],
                minecraft_username=data["minecraft_username"],
                success_url=data["success_url"],
                cancel_url=data["cancel_url"],
            )
        except CheckoutValidationError as e:
            logger.info(
                "Checkout rejected",
                extra={"user_id": str(request.user.pk), "error_code": e.error_code},
            )
            return Response(e.to_dict(), status=e.http_status)
        except PaymentProcessingError as e:
            return Response(e.to_dict(), status=e.http_status)

        return Response(result.to_response())


@extend_schema(
    summary="Start Stripe checkout",
    tags=["Orders"],
    request=CheckoutRequestSerializer,
    responses={
        200: CheckoutResponseSerializer,
        400: OpenApiResponse(description="Cart rejected"),
        502: OpenApiResponse(description="Stripe unavailable"),
    },
)
class StripeCheckoutView(BaseCheckoutView):
    def start_checkout(self, **kwargs):
        return CheckoutService.start_stripe_checkout(**kwargs)


@extend_schema(
    summary="Start Square checkout",
    tags=["Orders"],
    request=CheckoutRequestSerializer,
    responses={
        200: CheckoutResponseSerializer,
        400: OpenApiResponse(description="Cart rejected"),
        502: OpenApiResponse(description="Square unavailable"),
    },
)
class SquareCheckoutView(BaseCheckoutView):
    def start_checkout(self, **kwargs):
        return CheckoutService.start_square_checkout(**kwargs)


@extend_schema(summary="List my orders", tags=["Orders"])
class MyOrderListView(generics.ListAPIView):
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Order.objects.for_user(self.request.user).with_items()


@extend_schema(
    summary="List all orders",
    tags=["Orders - Admin"],
    parameters=[OpenApiParameter("status", str, description="Filter by status")],
)
class AdminOrderListView(generics.ListAPIView):
    serializer_class = AdminOrderSerializer
    permission_classes = [IsStaffUser]

    def get_queryset(self):
        queryset = Order.objects.with_items()
        status_filter = self.request.query_params.get("status")
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return queryset


class AdminOrderStatusView(APIView):
    """Refund an order or override its status."""

    permission_classes = [IsStaffUser]

    @extend_schema(
        summary="Change order status",
        tags=["Orders - Admin"],
        request=OrderStatusUpdateSerializer,
        responses={
            200: AdminOrderSerializer,
            409: OpenApiResponse(description="Refund of an order that is not completed"),
        },
    )
    def post(self, request, pk):
        order = get_object_or_404(Order, pk=pk)
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = serializer.validated_data["status"]

        if new_status == OrderStatus.REFUNDED:
            try:
                order = OrderLifecycleService.refund(order, actor=request.user)
            except InvalidStateTransitionError as e:
                return Response(e.to_dict(), status=e.http_status)
        else:
            order = OrderLifecycleService.override_status(
                order, new_status, actor=request.user
            )

        order = Order.objects.with_items().get(pk=order.pk)
        return Response(AdminOrderSerializer(order).data)
