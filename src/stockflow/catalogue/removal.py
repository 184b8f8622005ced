"""Product removal.

A product referenced by any order line cannot be deleted. Otherwise the
product goes, and its stock record goes with it. The caller holds the
product's stock lock (see ``stockflow.service.remove_product``).
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from stockflow.catalogue.product import Product
from stockflow.domain import logger, stockflow
from stockflow.exceptions import LockNotHeld, ReferentialIntegrityError
from stockflow.inventory.locks import get_lock_registry, stock_key
from stockflow.inventory.stock import StockRecord
from stockflow.ordering.order import OrderLine


@stockflow.command(part_of="Product")
class RemoveProduct:
    product_id: Identifier(required=True)


@stockflow.command_handler(part_of=Product)
class RemoveProductHandler:
    @handle(RemoveProduct)
    def remove_product(self, command):
        if not get_lock_registry().holds(stock_key(command.product_id)):
            raise LockNotHeld([stock_key(command.product_id)])

        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product_id = str(product.id)

        line_dao = current_domain.repository_for(OrderLine)._dao
        lines = line_dao.query.filter(product_id=product_id).limit(None).all().items
        if lines:
            raise ReferentialIntegrityError("product", product_id, f"{len(lines)} order line(s)")

        stock_repo = current_domain.repository_for(StockRecord)
        try:
            stock_repo._dao.delete(stock_repo.get(product_id))
        except ObjectNotFoundError:
            pass  # Never entered inventory

        product.remove()
        repo.add(product)
        repo._dao.delete(product)
        logger.info("product_removed", product_id=product_id)
