"""State transition engine.

On every order state change decide whether stock must be withdrawn, restored,
or left alone, and apply that decision in the same unit of work as the state
change itself:

- entering PAID withdraws each line's quantity from its stock record. Every
  line is checked before any record is touched, so a shortfall on any line
  leaves all records and the order as they were;
- PAID → CANCELLED restores each line's quantity, with no upper bound;
- any other permitted transition is a pure status change.

Stock records are visited in ascending product identity, matching the lock
order. The handler refuses to run unless the calling thread holds the order's
lock and, for stock-affecting transitions, the lock of every product on the
order. ``stockflow.service.transition_state`` takes those locks.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from stockflow.domain import logger, stockflow
from stockflow.exceptions import InventoryInconsistency, LockNotHeld
from stockflow.inventory.locks import get_lock_registry, order_key, stock_key
from stockflow.inventory.stock import StockRecord
from stockflow.ordering.order import Order, OrderState, StockEffect


@stockflow.command(part_of="Order")
class TransitionOrderState:
    order_id = Identifier(required=True)
    target_state = String(required=True, choices=OrderState)


def required_lock_keys(order, effect) -> list:
    """Lock keys a transition of ``order`` with ``effect`` must run under, in acquisition order."""
    keys = [order_key(order.id)]
    if effect is not StockEffect.NONE:
        keys.extend(stock_key(product_id) for product_id in order.product_ids())
    return keys


def _load_records(order):
    """Stock records for the order's lines, paired with the lines, in product order."""
    repo = current_domain.repository_for(StockRecord)
    pairs = []
    for product_id in order.product_ids():
        try:
            record = repo.get(product_id)
        except ObjectNotFoundError:
            raise InventoryInconsistency(product_id) from None
        pairs.append((record, order.line_for(product_id)))
    return pairs


def _withdraw(order):
    pairs = _load_records(order)

    for record, line in pairs:
        record.ensure_available(line.quantity)

    repo = current_domain.repository_for(StockRecord)
    for record, line in pairs:
        record.withdraw(line.quantity, order_id=str(order.id))
        repo.add(record)


def _restore(order):
    repo = current_domain.repository_for(StockRecord)
    for record, line in _load_records(order):
        record.restore(line.quantity, order_id=str(order.id))
        repo.add(record)


@stockflow.command_handler(part_of=Order)
class TransitionOrderStateHandler:
    @handle(TransitionOrderState)
    def transition_order_state(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.state

        effect = order.plan_transition(command.target_state)

        keys = required_lock_keys(order, effect)
        if not get_lock_registry().holds(*keys):
            raise LockNotHeld(keys)

        if effect is StockEffect.WITHDRAW:
            _withdraw(order)
        elif effect is StockEffect.RESTORE:
            _restore(order)

        order.transition_to(command.target_state)
        repo.add(order)

        logger.info(
            "order_state_changed",
            order_id=str(order.id),
            previous_state=previous,
            new_state=order.state,
            stock_effect=effect.value,
            lines=len(order.lines),
        )
