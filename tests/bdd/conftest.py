"""Shared BDD fixtures and step definitions for order and stock scenarios."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then, when
from stockflow import service
from stockflow.catalogue.pricing import ChangeProductPrice
from stockflow.catalogue.registration import RegisterProduct
from stockflow.exceptions import StockflowError


# ---------------------------------------------------------------------------
# Scenario state
# ---------------------------------------------------------------------------
@pytest.fixture()
def products():
    """Product ids by scenario name."""
    return {}


@pytest.fixture()
def context():
    return {"order_id": None}


@pytest.fixture()
def error():
    """Container for the failure captured by a When step."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a registered buyer", target_fixture="buyer")
def a_registered_buyer(make_user):
    return make_user(name="Bdd Buyer", email="bdd.buyer@example.com")


@given(
    parsers.cfparse(
        'a product "{name}" priced {price} with {quantity:d} units in stock and a reorder threshold of {threshold:d}'
    )
)
def a_stocked_product(products, name, price, quantity, threshold):
    product_id = current_domain.process(RegisterProduct(name=name, price=price), asynchronous=False)
    service.initialize_stock(product_id, quantity, reorder_threshold=threshold)
    products[name] = product_id


@given(parsers.cfparse('an entered order with {quantity:d} units of "{name}"'))
def an_entered_order(buyer, products, context, quantity, name):
    context["order_id"] = service.create_order(buyer)
    service.add_or_merge_line(context["order_id"], products[name], quantity)


# ---------------------------------------------------------------------------
# When steps (also usable as Given)
# ---------------------------------------------------------------------------
@given(parsers.cfparse('{quantity:d} more units of "{name}" are added to the order'))
@when(parsers.cfparse('{quantity:d} more units of "{name}" are added to the order'))
def more_units_added(products, context, quantity, name):
    service.add_or_merge_line(context["order_id"], products[name], quantity)


@when(parsers.cfparse('the price of "{name}" changes to {price}'))
def price_changes(products, name, price):
    current_domain.process(ChangeProductPrice(product_id=products[name], price=price), asynchronous=False)


@when(parsers.cfparse('the order is moved to "{state}"'))
def move_order(context, error, state):
    try:
        service.transition_state(context["order_id"], state)
    except StockflowError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order is "{state}"'))
def order_is(context, state):
    assert service.get_order(context["order_id"])["state"] == state


@then(parsers.cfparse('product "{name}" has {quantity:d} units in stock'))
def product_has_units(products, name, quantity):
    assert service.get_stock(products[name])["quantity"] == quantity
