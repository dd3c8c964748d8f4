"""
State machine enums for order models.
"""

from orders.state_machines.states import OrderStatus

__all__ = [
    "OrderStatus",
]
