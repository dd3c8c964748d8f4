"""
URL configuration for the payments app.

Routes:
    - POST /webhooks/stripe/ - Stripe webhook endpoint
    - POST /webhooks/square/ - Square webhook endpoint

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.
"""

from django.urls import path

from payments.webhooks.views import square_webhook, stripe_webhook

app_name = "payments"

urlpatterns = [
    path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
    path("webhooks/square/", square_webhook, name="square_webhook"),
]
