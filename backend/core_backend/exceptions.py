"""
Point-of-sale error taxonomy and the DRF exception handler that exposes it.

Services raise one of the classified errors below instead of a generic
exception; the API layer turns each kind into a status code and a stable
``code`` so clients never have to parse messages.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class POSError(Exception):
    """
    Base exception for point-of-sale core errors.

    Carries a machine-readable ``code`` and optional ``details`` dict that is
    passed through to the API response unchanged.
    """

    code = "pos_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self):
        return {"error": self.message, "code": self.code, "details": self.details}


class NotFound(POSError):
    """Referenced table, line, ticket or bill does not exist."""

    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ItemNotFound(NotFound):
    """Item name could not be resolved by the catalog."""

    code = "item_not_found"

    def __init__(self, item_name, details=None):
        super().__init__(f"Item '{item_name}' not found in catalog", details)
        self.item_name = item_name


class InvalidTransition(POSError):
    code = "invalid_transition"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message, current_status=None, target_status=None):
        details = {}
        if current_status is not None:
            details["current_status"] = str(current_status)
        if target_status is not None:
            details["target_status"] = str(target_status)
        super().__init__(message, details)
        self.current_status = current_status
        self.target_status = target_status


class InvalidInput(POSError):
    """A required field is missing or a value is out of range."""

    code = "invalid_input"


class CustomerRequired(InvalidInput):
    code = "customer_required"

    def __init__(self, message="Customer is required for credit bills", details=None):
        super().__init__(message, details)


class NothingToClose(POSError):
    """Table already has an open bill and there are no new items to add to it."""

    code = "nothing_to_close"
    status_code = status.HTTP_409_CONFLICT


class NoItemsToClose(POSError):
    """Table has neither an open bill nor any provisional items."""

    code = "no_items_to_close"
    status_code = status.HTTP_409_CONFLICT


class InvalidShift(POSError):
    code = "invalid_shift"


def pos_exception_handler(exc, context):
    """
    Project-wide DRF exception handler.

    Classified point-of-sale errors become ``{"error", "code", "details"}``
    bodies with their mapped status; everything else falls back to the
    default DRF handler.
    """
    if isinstance(exc, POSError):
        request = context.get("request")
        view = context.get("view")
        logger.warning(
            f"Rejected {request.method if request else '?'} "
            f"{request.path if request else '?'} in {view.__class__.__name__}: "
            f"{exc.code}: {exc.message}"
        )
        return Response(exc.to_dict(), status=exc.status_code)

    return exception_handler(exc, context)
