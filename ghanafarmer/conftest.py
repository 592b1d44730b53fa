import pytest
from rest_framework.test import APIClient

from ghanafarmer.users.models import User
from ghanafarmer.users.tests.factories import UserFactory


@pytest.fixture(autouse=True)
def _ensure_billing_plans(db) -> None:
    """
    Ensure billing Plans exist for tests that create subscriptions or list plans.
    """
    from ghanafarmer.billing.services import sync_plans_from_catalog

    sync_plans_from_catalog()


@pytest.fixture
def user(db) -> User:
    return UserFactory()


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()
