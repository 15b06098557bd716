"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.cart.store import CartLine, CartStore
from pytest_bdd import given, parsers
from shared.auth import Principal


@pytest.fixture()
def principal():
    return Principal.establish("cust-001", "asha@example.com")


@pytest.fixture()
def outcome():
    """Container for results and captured errors of When steps."""
    return {"result": None, "exc": None}


@given(parsers.cfparse("a signed-in customer with a cart worth {total:d} TZS"), target_fixture="cart")
def _(total, items):
    cart = CartStore()
    for item in items:
        cart.add(CartLine(**item))
    assert cart.total_price() == total
    return cart
