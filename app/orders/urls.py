"""
URL configuration for orders app.
"""

from django.urls import path

from orders.views import (
    AdminOrderListView,
    AdminOrderStatusView,
    MyOrderListView,
    SquareCheckoutView,
    StripeCheckoutView,
)

app_name = "orders"

urlpatterns = [
    path("", MyOrderListView.as_view(), name="my-orders"),
    path("checkout/stripe/", StripeCheckoutView.as_view(), name="checkout-stripe"),
    path("checkout/square/", SquareCheckoutView.as_view(), name="checkout-square"),
    path("admin/", AdminOrderListView.as_view(), name="admin-list"),
    path("admin/<uuid:pk>/status/", AdminOrderStatusView.as_view(), name="admin-status"),
]
