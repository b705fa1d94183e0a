"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
from decimal import Decimal

import pytest
from django.core.cache import cache


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def clear_cache_after_test():
    """
    Clear cache after each test to prevent cache pollution.

    This ensures tests don't interfere with each other through cached data.
    """
    yield  # Run the test
    cache.clear()  # Clear all cache keys


@pytest.fixture(autouse=True)
def floor_plan(request):
    """
    Every database test starts with tables 1-10 on the floor.

    Orders, tickets and bills refuse table numbers that don't exist, so
    tests can use any table from 1 to 10 without setting it up.
    """
    if request.node.get_closest_marker("django_db") is None:
        return None
    return request.getfixturevalue("dining_tables")


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/billing/tables/')
            assert response.status_code == 401
    """
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def cashier(django_user_model):
    """Staff user that operates the till"""
    return django_user_model.objects.create_user(
        username="cashier",
        password="test-pass-123",
    )


@pytest.fixture
def authenticated_client(api_client, cashier):
    """
    Provide authenticated API client.

    Usage:
        def test_protected_endpoint(authenticated_client):
            response = authenticated_client.get('/api/kitchen-orders/pending/')
            assert response.status_code == 200
    """
    api_client.force_authenticate(user=cashier)
    return api_client


# ============================================================================
# MASTER DATA FIXTURES
# ============================================================================

@pytest.fixture
def dining_tables(db):
    """Tables 1-10, split across two sections"""
    from masters.models import DiningTable

    return [
        DiningTable.objects.create(
            id=number,
            name=f"T{number}",
            section="Hall" if number <= 5 else "Garden",
        )
        for number in range(1, 11)
    ]


@pytest.fixture
def menu(db):
    """
    A small menu:
    - Tea 20.00 and Samosa 15.00 are cooked in the kitchen
    - Water 10.00 is served from the counter
    """
    from masters.models import MenuItem

    return {
        "tea": MenuItem.objects.create(name="Tea", item_code="T01", rate=Decimal("20.00")),
        "samosa": MenuItem.objects.create(name="Samosa", item_code="S01", rate=Decimal("15.00")),
        "water": MenuItem.objects.create(
            name="Water", item_code="W01", rate=Decimal("10.00"), is_kitchen_item=False
        ),
    }


@pytest.fixture
def waiter(db):
    from masters.models import Waiter
    return Waiter.objects.create(name="Ravi")


@pytest.fixture
def customer(db):
    from masters.models import Customer
    return Customer.objects.create(name="Anita Rao", phone="9800000001")


@pytest.fixture
def bank(db):
    from masters.models import Bank
    return Bank.objects.create(name="State Bank", account_no="001122")
