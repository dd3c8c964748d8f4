"""
URL configuration for the store backend.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/                  - Authentication endpoints
        discord/                   - Discord OAuth token -> JWT pair
        token/refresh/             - Refresh an access token
        profile/                   - Current user (GET/PATCH)
    /api/v1/catalog/               - Catalog endpoints
        products/                  - Active products (public)
        products/{id}/stock/       - Set stock level (admin)
        sync/stripe/               - Import Stripe products (admin)
        sync/square/               - Import Square catalog (admin)
    /api/v1/orders/                - Order endpoints
        (root)                     - Current user's orders
        checkout/stripe/           - Start a Stripe Checkout session
        checkout/square/           - Start a Square payment link
        admin/                     - All orders (admin)
        admin/{id}/status/         - Change order status (admin)
    /api/v1/payments/              - Payment endpoints
        webhooks/stripe/           - Stripe webhook endpoint (POST)
        webhooks/square/           - Square webhook endpoint (POST)
    /api/v1/notifications/         - Admin notification endpoints
        admin/                     - List notifications
        admin/{id}/                - Delete notification
        admin/{id}/read/           - Mark as read
        admin/read-all/            - Mark all as read

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    # Authentication
    path("auth/", include("authentication.urls")),
    # Catalog
    path("catalog/", include("catalog.urls")),
    # Orders and checkout
    path("orders/", include("orders.urls")),
    # Payments (provider webhooks)
    path("payments/", include("payments.urls")),
    # Notifications
    path("notifications/", include("notifications.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Store Admin"
admin.site.site_title = "Store Admin Portal"
admin.site.index_title = "Orders, catalog and notifications"
