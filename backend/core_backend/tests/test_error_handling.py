"""
Global Error Handling Tests

The point-of-sale error taxonomy and the DRF exception handler that turns
each error kind into a status code and a stable ``code``.

Run with: pytest backend/core_backend/tests/test_error_handling.py -v
"""
import pytest
from rest_framework.test import APIRequestFactory

from core_backend.exceptions import (
    POSError,
    NotFound,
    ItemNotFound,
    InvalidTransition,
    InvalidInput,
    CustomerRequired,
    NothingToClose,
    NoItemsToClose,
    InvalidShift,
    pos_exception_handler,
)


def _context(path="/api/billing/bills/1/pay/"):
    request = APIRequestFactory().post(path)
    return {"request": request, "view": None}


class TestErrorTaxonomy:

    @pytest.mark.parametrize(
        "exc, code, status_code",
        [
            (NotFound("Bill 9 not found"), "not_found", 404),
            (ItemNotFound("Dosa"), "item_not_found", 404),
            (InvalidTransition("no"), "invalid_transition", 409),
            (InvalidInput("bad"), "invalid_input", 400),
            (CustomerRequired(), "customer_required", 400),
            (NothingToClose("nothing"), "nothing_to_close", 409),
            (NoItemsToClose("empty"), "no_items_to_close", 409),
            (InvalidShift("same table"), "invalid_shift", 400),
        ],
    )
    def test_each_error_kind_maps_to_code_and_status(self, exc, code, status_code):
        """
        CRITICAL: Verify every classified error carries a stable code and HTTP status.

        Value: Clients branch on ``code``, never on the message text
        """
        assert isinstance(exc, POSError)
        assert exc.code == code
        assert exc.status_code == status_code
        assert exc.to_dict()["code"] == code

    def test_item_not_found_is_a_not_found(self):
        exc = ItemNotFound("Dosa")
        assert isinstance(exc, NotFound)
        assert exc.item_name == "Dosa"
        assert "Dosa" in exc.message

    def test_invalid_transition_details_carry_statuses(self):
        exc = InvalidTransition("Cannot settle", current_status="PAID", target_status="CREDIT")
        assert exc.details == {"current_status": "PAID", "target_status": "CREDIT"}

    def test_customer_required_is_an_invalid_input(self):
        assert isinstance(CustomerRequired(), InvalidInput)


class TestExceptionHandler:

    def test_pos_error_becomes_structured_response(self):
        """
        CRITICAL: Verify the handler renders {"error", "code", "details"} with the mapped status.
        """
        exc = NothingToClose("Table 7 has nothing new", {"table_no": 7})

        response = pos_exception_handler(exc, _context())

        assert response.status_code == 409
        assert response.data == {
            "error": "Table 7 has nothing new",
            "code": "nothing_to_close",
            "details": {"table_no": 7},
        }

    def test_pos_error_is_logged_as_warning(self, caplog):
        with caplog.at_level("WARNING", logger="core_backend.exceptions"):
            pos_exception_handler(InvalidShift("Cannot shift table 3 onto itself"), _context())

        assert "invalid_shift" in caplog.text

    def test_other_exceptions_fall_back_to_drf(self):
        from rest_framework.exceptions import ValidationError

        response = pos_exception_handler(ValidationError({"quantity": ["required"]}), _context())

        assert response.status_code == 400
        assert response.data == {"quantity": ["required"]}

    def test_unknown_exceptions_are_left_to_django(self):
        assert pos_exception_handler(RuntimeError("boom"), _context()) is None


@pytest.mark.django_db
class TestGlobalAPIErrorResponses:

    def test_unauthenticated_request_returns_401(self, api_client):
        """
        CRITICAL: Verify unauthenticated API requests are rejected.

        Value: Ensures authentication is enforced globally across all endpoints
        """
        response = api_client.get("/api/billing/tables/")

        assert response.status_code == 401

    def test_health_check_is_public(self, api_client):
        response = api_client.get("/api/health/")

        assert response.status_code == 200
