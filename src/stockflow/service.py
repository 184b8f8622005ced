"""Entry points for callers of the stockflow core.

Each call processes one command synchronously, so each runs as a single unit
of work. Calls that touch an existing order take that order's row lock before
the unit of work opens and release it after it has committed or rolled back.
Line additions, stock initialization and product removal lock the product's
stock record. State transitions with a stock effect lock the stock records of
every product on the order, in ascending product identity.
"""

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from stockflow.catalogue.removal import RemoveProduct
from stockflow.domain import logger
from stockflow.inventory.initialization import InitializeStock
from stockflow.inventory.locks import get_lock_registry, order_key, stock_key
from stockflow.inventory.stock import DEFAULT_REORDER_THRESHOLD, StockRecord
from stockflow.ordering.creation import CreateOrder
from stockflow.ordering.discard import DiscardOrder
from stockflow.ordering.lines import AddOrMergeLine
from stockflow.ordering.order import Order, OrderState
from stockflow.ordering.transition import TransitionOrderState, required_lock_keys


def _parse_state(target_state) -> OrderState:
    if isinstance(target_state, OrderState):
        return target_state
    try:
        return OrderState(target_state)
    except ValueError:
        allowed = ", ".join(state.value for state in OrderState)
        raise ValidationError({"target_state": [f"Unknown state {target_state!r}; expected one of {allowed}"]}) from None


def create_order(user_id) -> str:
    """Open an empty order for ``user_id``. Returns the new order id."""
    return current_domain.process(CreateOrder(user_id=user_id), asynchronous=False)


def add_or_merge_line(order_id, product_id, quantity) -> str:
    """Add ``quantity`` of a product to an entered order. Returns the line id."""
    with get_lock_registry().hold(order_key(order_id), stock_key(product_id)):
        return current_domain.process(
            AddOrMergeLine(order_id=order_id, product_id=product_id, quantity=quantity),
            asynchronous=False,
        )


def transition_state(order_id, target_state) -> None:
    """Move an order to ``target_state``, withdrawing or restoring stock as required.

    Raises ``InvalidTransition``, ``InsufficientStock``, ``InventoryInconsistency``
    or ``ConcurrencyTimeout``; in every failure case nothing has changed.
    """
    target = _parse_state(target_state)
    registry = get_lock_registry()

    with registry.hold(order_key(order_id)):
        # The line set cannot change while the order lock is held.
        order = current_domain.repository_for(Order).get(order_id)
        effect = order.plan_transition(target)

        with registry.hold(*required_lock_keys(order, effect)):
            current_domain.process(
                TransitionOrderState(order_id=order_id, target_state=target.value),
                asynchronous=False,
            )

    logger.info(
        "transition_committed",
        order_id=str(order_id),
        previous_state=order.state,
        new_state=target.value,
        stock_effect=effect.value,
    )


def discard_order(order_id) -> None:
    """Delete an order that has no lines."""
    with get_lock_registry().hold(order_key(order_id)):
        current_domain.process(DiscardOrder(order_id=order_id), asynchronous=False)


def get_order(order_id) -> dict:
    """Point-in-time snapshot of an order and its lines."""
    order = current_domain.repository_for(Order).get(order_id)
    return {
        "order_id": str(order.id),
        "user_id": str(order.user_id),
        "state": order.state,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "lines": [
            {
                "line_id": str(line.id),
                "product_id": str(line.product_id),
                "quantity": line.quantity,
                "unit_price_snapshot": line.unit_price,
                "subtotal": line.subtotal,
                "added_at": line.added_at,
            }
            for line in sorted(order.lines, key=lambda line: (line.added_at, str(line.product_id)))
        ],
        "total": order.total,
    }


def get_stock(product_id) -> dict:
    """Point-in-time snapshot of a product's stock record."""
    record = current_domain.repository_for(StockRecord).get(product_id)
    return {
        "product_id": str(record.product_id),
        "quantity": record.quantity,
        "reorder_threshold": record.reorder_threshold,
        "updated_at": record.updated_at,
        "is_low": record.is_low,
    }


def initialize_stock(product_id, quantity, reorder_threshold=DEFAULT_REORDER_THRESHOLD) -> str:
    """Create the stock record of a product. Returns the product id."""
    with get_lock_registry().hold(stock_key(product_id)):
        return current_domain.process(
            InitializeStock(product_id=product_id, quantity=quantity, reorder_threshold=reorder_threshold),
            asynchronous=False,
        )


def remove_product(product_id) -> None:
    """Delete a product that no order line references, along with its stock record."""
    with get_lock_registry().hold(stock_key(product_id)):
        current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)
