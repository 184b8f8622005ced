"""Low-stock advisories.

The warning is logged from the ``LowStockDetected`` event, which is only
dispatched once the unit of work that raised it has committed. A sale that
rolls back leaves no advisory behind.
"""

from protean import handle

from stockflow.domain import logger, stockflow
from stockflow.inventory.events import LowStockDetected
from stockflow.inventory.stock import StockRecord


@stockflow.event_handler(part_of=StockRecord)
class LowStockAdvisoryHandler:
    @handle(LowStockDetected)
    def log_advisory(self, event: LowStockDetected) -> None:
        logger.warning(
            "low_stock_detected",
            product_id=str(event.product_id),
            order_id=event.order_id,
            quantity=event.quantity,
            reorder_threshold=event.reorder_threshold,
        )
