"""
Services for the billing app.

- BillService: close a table into a bill, settle it, search and summarize
"""

from .bill_service import BillService

__all__ = ['BillService']
