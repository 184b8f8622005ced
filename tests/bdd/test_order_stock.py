"""BDD tests for order payment, cancellation and the cart merge rule."""

from decimal import Decimal

from protean import current_domain
from pytest_bdd import parsers, scenarios, then
from stockflow import service
from stockflow.exceptions import InsufficientStock, InvalidTransition

scenarios("features/order_stock.feature")


def _low_stock_events():
    messages = current_domain.event_store.store.read("stockflow::stock_record")
    return [
        m
        for m in messages
        if m.metadata and m.metadata.headers and m.metadata.headers.type == "Stockflow.LowStockDetected.v1"
    ]


@then("no low-stock advisory was raised")
def no_advisory():
    assert _low_stock_events() == []


@then(parsers.cfparse('a low-stock advisory was raised for "{name}" with {quantity:d} units'))
def advisory_raised(products, name, quantity):
    matching = [m.data for m in _low_stock_events() if m.data["product_id"] == products[name]]
    assert quantity in [data["quantity"] for data in matching]


@then(parsers.cfparse("the order has {count:d} line"))
def order_has_lines(context, count):
    assert len(service.get_order(context["order_id"])["lines"]) == count


@then(parsers.cfparse('the line for "{name}" has {quantity:d} units at {price}'))
def line_has(products, context, name, quantity, price):
    line = next(
        line for line in service.get_order(context["order_id"])["lines"] if line["product_id"] == products[name]
    )
    assert line["quantity"] == quantity
    assert line["unit_price_snapshot"] == Decimal(price)


@then(parsers.cfparse('the transition fails with insufficient stock for "{name}"'))
def fails_with_insufficient_stock(products, error, name):
    assert isinstance(error["exc"], InsufficientStock)
    assert error["exc"].product_id == products[name]


@then("the transition fails as invalid")
def fails_as_invalid(error):
    assert isinstance(error["exc"], InvalidTransition)
