"""
Services for the orders app.

- ProvisionalOrderService: per-table store of unconfirmed order lines
"""

from .provisional_order_service import ProvisionalOrderService

__all__ = ['ProvisionalOrderService']
