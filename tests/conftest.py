from decimal import Decimal

import pytest

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group

from rest_framework.test import APIClient

from modules.core.permissions import ROLE_ADMIN, ROLE_USER
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


def _client_for(username: str, *roles: str) -> APIClient:
    user = User.objects.create_user(username=username, password="testpass123")
    for role in roles:
        user.groups.add(Group.objects.get_or_create(name=role)[0])
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def admin_client():
    """APIClient authenticated as a member of the ADMIN group."""
    return _client_for("catalog-admin", ROLE_ADMIN)


@pytest.fixture()
def user_client():
    """APIClient authenticated as a member of the USER group."""
    return _client_for("catalog-user", ROLE_USER)


@pytest.fixture()
def no_role_client():
    """APIClient authenticated as a user without any role."""
    return _client_for("nobody")


@pytest.fixture()
def product_repository():
    return ProductDjangoRepository()


@pytest.fixture()
def sample_product(product_repository):
    """A persisted Product at version 0."""
    return product_repository.insert(
        Product(name="Steak", description="Dry-aged ribeye", price=Decimal("1000.00"))
    )
