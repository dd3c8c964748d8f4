"""
Payments app for Stripe and Square integration.

This app handles:
- Provider adapters (Stripe Checkout Sessions, Square payment links, catalogs)
- Webhook signature verification
- Normalising provider events into payment outcomes
- Webhook endpoints and the handler registry
- Webhook audit records and their housekeeping

Related apps:
    - orders: Order lifecycle the outcomes are applied to
    - catalog: Product sync driven by catalog webhooks
    - notifications: Side effects after an order completes
"""
