"""
Orders app.

Checkout (pending order creation + provider session) and the order
lifecycle driven by payment webhooks.
"""
