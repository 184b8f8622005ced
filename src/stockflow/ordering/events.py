"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from stockflow.domain import stockflow


@stockflow.event(part_of="Order")
class OrderCreated:
    """An empty order was opened for a user."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    created_at = DateTime(required=True)


@stockflow.event(part_of="Order")
class OrderLineAdded:
    """A product was added to the order for the first time."""

    __version__ = 1

    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    unit_price_snapshot = String(required=True)  # Decimal text
    added_at = DateTime(required=True)


@stockflow.event(part_of="Order")
class OrderLineMerged:
    """A product already on the order was added again; its line quantity grew."""

    __version__ = 1

    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    product_id = Identifier(required=True)
    added_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    unit_price_snapshot = String(required=True)


@stockflow.event(part_of="Order")
class OrderStateChanged:
    """The order moved through its lifecycle.

    ``stock_effect`` is one of "none", "withdraw" or "restore".
    """

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    previous_state = String(required=True)
    new_state = String(required=True)
    stock_effect = String(required=True)
    changed_at = DateTime(required=True)


@stockflow.event(part_of="Order")
class OrderDiscarded:
    """An order without lines was deleted."""

    __version__ = 1

    order_id = Identifier(required=True)
    discarded_at = DateTime(required=True)
