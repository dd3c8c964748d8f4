"""
Catalog views.

Endpoints:
    GET   /api/v1/catalog/products/               - Active products (public)
    PATCH /api/v1/catalog/products/{id}/stock/    - Set stock (admin)
    POST  /api/v1/catalog/sync/stripe/            - Pull Stripe catalog now (admin)
    POST  /api/v1/catalog/sync/square/            - Queue Square catalog sync (admin)
"""

import logging

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from catalog.models import Product
from catalog.serializers import (
    AdminProductSerializer,
    ProductSerializer,
    StockUpdateSerializer,
    SyncSummarySerializer,
)
from catalog.services import CatalogSyncService
from catalog.tasks import sync_square_catalog_task
from core.permissions import IsStaffUser
from payments.exceptions import StripeError

logger = logging.getLogger(__name__)


@extend_schema(
    summary="List products",
    tags=["Catalog"],
    parameters=[OpenApiParameter("category", str, description="Filter by category")],
)
class ProductListView(generics.ListAPIView):
    """Active products ordered by category and sort order."""

    serializer_class = ProductSerializer
    permission_classes = [AllowAny]
    pagination_class = None

    def get_queryset(self):
        queryset = Product.objects.active()
        category = self.request.query_params.get("category")
        if category:
            queryset = queryset.in_category(category)
        return queryset


class ProductStockView(APIView):
    """Administrative stock update."""

    permission_classes = [IsStaffUser]

    @extend_schema(
        summary="Set product stock",
        tags=["Catalog - Admin"],
        request=StockUpdateSerializer,
        responses={
            200: AdminProductSerializer,
            502: OpenApiResponse(description="Stripe metadata update failed"),
        },
    )
    def patch(self, request, pk):
        product = get_object_or_404(Product, pk=pk)
        serializer = StockUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            product = CatalogSyncService.update_stock(
                product, serializer.validated_data["stock"]
            )
        except StripeError as e:
            return Response(e.to_dict(), status=e.http_status)

        logger.info(
            "Stock updated by admin",
            extra={
                "product_id": str(product.id),
                "stock": product.stock,
                "actor": str(request.user.pk),
            },
        )
        return Response(AdminProductSerializer(product).data)


class StripeCatalogSyncView(APIView):
    """Run a full Stripe catalog sync synchronously."""

    permission_classes = [IsStaffUser]

    @extend_schema(
        summary="Sync Stripe catalog",
        tags=["Catalog - Admin"],
        request=None,
        responses={200: SyncSummarySerializer},
    )
    def post(self, request):
        try:
            summary = CatalogSyncService.sync_stripe_catalog()
        except StripeError as e:
            return Response(e.to_dict(), status=e.http_status)
        return Response({"success": True, **summary.to_dict()})


class SquareCatalogSyncView(APIView):
    """Queue a full Square catalog sync."""

    permission_classes = [IsStaffUser]

    @extend_schema(
        summary="Sync Square catalog",
        tags=["Catalog - Admin"],
        request=None,
        responses={202: OpenApiResponse(description="Sync queued")},
    )
    def post(self, request):
        result = sync_square_catalog_task.delay()
        return Response(
            {"queued": True, "task_id": result.id},
            status=status.HTTP_202_ACCEPTED,
        )
