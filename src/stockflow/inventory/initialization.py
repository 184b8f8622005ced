"""Stock initialization: a product enters inventory.

The caller holds the product's stock lock (see
``stockflow.service.initialize_stock``), so two initializations of the same
product cannot both find it unstocked.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from stockflow.catalogue.lookup import product_exists
from stockflow.domain import stockflow
from stockflow.exceptions import LockNotHeld
from stockflow.inventory.locks import get_lock_registry, stock_key
from stockflow.inventory.stock import DEFAULT_REORDER_THRESHOLD, StockRecord


@stockflow.command(part_of="StockRecord")
class InitializeStock:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=0)
    reorder_threshold = Integer(default=DEFAULT_REORDER_THRESHOLD, min_value=0)


@stockflow.command_handler(part_of=StockRecord)
class InitializeStockHandler:
    @handle(InitializeStock)
    def initialize_stock(self, command):
        if not get_lock_registry().holds(stock_key(command.product_id)):
            raise LockNotHeld([stock_key(command.product_id)])

        if not product_exists(command.product_id):
            raise ValidationError({"product_id": [f"Unknown product {command.product_id}"]})

        repo = current_domain.repository_for(StockRecord)
        try:
            repo.get(command.product_id)
        except ObjectNotFoundError:
            pass
        else:
            raise ValidationError({"product_id": [f"Product {command.product_id} already has a stock record"]})

        record = StockRecord.create(
            product_id=command.product_id,
            quantity=command.quantity,
            reorder_threshold=command.reorder_threshold,
        )
        record._check_low_stock()
        repo.add(record)
        return str(record.product_id)
