"""Shared fixtures for the Recipeman test suite."""

import pytest

from recipeman.conf import get_inventory_backend, reset_inventory_backend


@pytest.fixture(autouse=True)
def _fresh_inventory_backend():
    reset_inventory_backend()
    yield
    reset_inventory_backend()


@pytest.fixture
def inventory():
    """In-memory inventory with the items most tests price against."""
    backend = get_inventory_backend()
    backend.add("dough", name="Dough", unit="g", unit_cost="0.01")
    backend.add("cheese", name="Mozzarella", unit="g", unit_cost="0.05")
    backend.add("sauce", name="Tomato sauce", unit="ml", unit_cost="0.02")
    backend.add("box", name="Pizza box", unit="un", unit_cost="1.50")
    return backend
