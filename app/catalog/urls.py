"""
URL configuration for catalog app.
"""

from django.urls import path

from catalog.views import (
    ProductListView,
    ProductStockView,
    SquareCatalogSyncView,
    StripeCatalogSyncView,
)

app_name = "catalog"

urlpatterns = [
    path("products/", ProductListView.as_view(), name="product-list"),
    path("products/<uuid:pk>/stock/", ProductStockView.as_view(), name="product-stock"),
    path("sync/stripe/", StripeCatalogSyncView.as_view(), name="sync-stripe"),
    path("sync/square/", SquareCatalogSyncView.as_view(), name="sync-square"),
]
