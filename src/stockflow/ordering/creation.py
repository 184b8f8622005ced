"""Order creation: command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from stockflow.domain import logger, stockflow
from stockflow.identity.lookup import user_exists
from stockflow.ordering.order import Order


@stockflow.command(part_of="Order")
class CreateOrder:
    """Open an empty order in the entered state."""

    user_id = Identifier(required=True)


@stockflow.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        if not user_exists(command.user_id):
            raise ValidationError({"user_id": [f"Unknown user {command.user_id}"]})

        order = Order.create(user_id=command.user_id)
        current_domain.repository_for(Order).add(order)
        logger.info("order_created", order_id=str(order.id), user_id=str(command.user_id))
        return str(order.id)
