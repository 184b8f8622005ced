"""Discarding an order that never received any lines."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from stockflow.domain import logger, stockflow
from stockflow.ordering.order import Order


@stockflow.command(part_of="Order")
class DiscardOrder:
    order_id = Identifier(required=True)


@stockflow.command_handler(part_of=Order)
class DiscardOrderHandler:
    @handle(DiscardOrder)
    def discard_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.discard()
        repo.add(order)
        repo._dao.delete(order)
        logger.info("order_discarded", order_id=str(order.id))
