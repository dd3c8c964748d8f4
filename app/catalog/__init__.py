"""
Catalog application.

Products offered by the store, their stock counters, and synchronisation
of product data from Stripe and Square.

Key components:
    - Product model: Purchasable item with price and stock
    - StockLedger: Atomic stock decrements and absolute sets
    - CatalogSyncService: Provider catalog upserts and restock announcements

Usage:
    from catalog.models import Product
    from catalog.services import StockLedger
"""
