"""Order line management: the cart merge rule.

The product's current list price is read inside the same unit of work and
copied onto a new line. Merging into an existing line keeps that line's
original price.

The caller must hold the order's lock and the product's stock lock, so the
product cannot be removed between the price read and the commit.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from stockflow.catalogue.lookup import product_price
from stockflow.domain import stockflow
from stockflow.exceptions import LockNotHeld
from stockflow.inventory.locks import get_lock_registry, order_key, stock_key
from stockflow.ordering.order import Order


@stockflow.command(part_of="Order")
class AddOrMergeLine:
    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@stockflow.command_handler(part_of=Order)
class AddOrMergeLineHandler:
    @handle(AddOrMergeLine)
    def add_or_merge_line(self, command):
        keys = [order_key(command.order_id), stock_key(command.product_id)]
        if not get_lock_registry().holds(*keys):
            raise LockNotHeld(keys)

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        try:
            unit_price = product_price(command.product_id)
        except ObjectNotFoundError:
            raise ValidationError({"product_id": [f"Unknown product {command.product_id}"]}) from None

        line_id = order.add_or_merge_line(
            product_id=command.product_id,
            quantity=command.quantity,
            unit_price=unit_price,
        )
        repo.add(order)
        return line_id
