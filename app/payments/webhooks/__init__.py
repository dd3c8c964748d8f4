"""
Webhook handling for Stripe and Square.

Webhooks are verified, recorded for audit and processed synchronously.

Usage:
    # In urls.py
    from payments.webhooks.views import square_webhook, stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
        path("webhooks/square/", square_webhook, name="square_webhook"),
    ]
"""
