"""User removal: refused while the user still owns orders."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from stockflow.domain import logger, stockflow
from stockflow.exceptions import ReferentialIntegrityError
from stockflow.identity.user import User
from stockflow.ordering.order import Order


@stockflow.command(part_of="User")
class RemoveUser:
    user_id: Identifier(required=True)


@stockflow.command_handler(part_of=User)
class RemoveUserHandler:
    @handle(RemoveUser)
    def remove_user(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)

        order_dao = current_domain.repository_for(Order)._dao
        orders = order_dao.query.filter(user_id=str(user.id)).limit(None).all().items
        if orders:
            raise ReferentialIntegrityError("user", str(user.id), f"{len(orders)} order(s)")

        user.remove()
        repo.add(user)
        repo._dao.delete(user)
        logger.info("user_removed", user_id=str(user.id))
