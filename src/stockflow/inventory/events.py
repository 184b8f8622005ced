"""Domain events for the StockRecord aggregate.

Every movement of sellable quantity is recorded with the quantity before and
after, and the order that caused it.
"""

from protean.fields import DateTime, Identifier, Integer

from stockflow.domain import stockflow


@stockflow.event(part_of="StockRecord")
class StockInitialized:
    """A product entered inventory with an opening quantity."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    reorder_threshold = Integer(required=True)
    initialized_at = DateTime(required=True)


@stockflow.event(part_of="StockRecord")
class StockWithdrawn:
    """Units left the ledger because an order was paid."""

    __version__ = 1

    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    withdrawn_at = DateTime(required=True)


@stockflow.event(part_of="StockRecord")
class StockRestored:
    """Units returned to the ledger because a paid order was cancelled."""

    __version__ = 1

    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    reorder_threshold = Integer(required=True)
    restored_at = DateTime(required=True)


@stockflow.event(part_of="StockRecord")
class LowStockDetected:
    """Quantity fell to or below the reorder threshold. Advisory only."""

    __version__ = 1

    product_id = Identifier(required=True)
    order_id = Identifier()
    quantity = Integer(required=True)
    reorder_threshold = Integer(required=True)
    detected_at = DateTime(required=True)
