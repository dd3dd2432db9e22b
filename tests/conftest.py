"""
Pytest configuration and fixtures for the retail POS platform.
"""

from decimal import Decimal

from django.core.cache import caches

import pytest


@pytest.fixture(autouse=True)
def clear_caches():
    """
    POS sessions and store summaries live in locmem caches that survive
    between tests; start every test from empty caches.
    """
    for alias in ("default", "query"):
        caches[alias].clear()
    yield
    for alias in ("default", "query"):
        caches[alias].clear()


@pytest.fixture
def api_client():
    """
    Fixture for Django REST framework API client.
    """
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def company():
    """
    Fixture for creating a test company.
    """
    from apps.core.models import Company

    return Company.objects.create(name="Corner Shop", slug="corner-shop")


@pytest.fixture
def other_company():
    from apps.core.models import Company

    return Company.objects.create(name="Rival Shop", slug="rival-shop")


@pytest.fixture
def store(company):
    """
    Fixture for creating the main store of the test company.
    """
    from apps.core.models import Store

    return Store.objects.create(
        company=company, name="Main Street", address="1 Main St", phone="555-0100"
    )


@pytest.fixture
def second_store(company):
    from apps.core.models import Store

    return Store.objects.create(company=company, name="Harbour", address="9 Quay Rd")


@pytest.fixture
def other_store(other_company):
    from apps.core.models import Store

    return Store.objects.create(company=other_company, name="Rival Main")


@pytest.fixture
def manager(company, store, django_user_model):
    """
    Fixture for a manager bound to the main store.
    """
    return django_user_model.objects.create_user(
        username="manager",
        email="manager@example.com",
        password="testpass123",
        company=company,
        store=store,
        role="MANAGER",
    )


@pytest.fixture
def company_admin(company, django_user_model):
    """
    Fixture for a company admin who chooses the store.
    """
    return django_user_model.objects.create_user(
        username="admin",
        email="admin@example.com",
        password="testpass123",
        company=company,
        role="COMPANY_ADMIN",
    )


@pytest.fixture
def store_owner(company, django_user_model):
    return django_user_model.objects.create_user(
        username="owner",
        email="owner@example.com",
        password="testpass123",
        company=company,
        role="STORE_OWNER",
    )


@pytest.fixture
def make_product(store):
    """
    Factory fixture for products; defaults to the main store.
    """
    from apps.inventory.models import Product

    def _make(name="Coffee", gross_price="12.10", vat_rate="21.00", stock=10, **kwargs):
        kwargs.setdefault("store", store)
        return Product.objects.create(
            name=name,
            gross_price=Decimal(gross_price),
            vat_rate=Decimal(vat_rate),
            stock=stock,
            **kwargs,
        )

    return _make


@pytest.fixture
def manager_client(api_client, manager):
    """
    Fixture for an API client authenticated as the store manager.
    """
    api_client.force_authenticate(user=manager)
    return api_client


@pytest.fixture
def admin_client(api_client, company_admin):
    api_client.force_authenticate(user=company_admin)
    return api_client
