"""Low stock report: products at or below their reorder threshold."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, Integer
from protean.utils.globals import current_domain

from stockflow.catalogue.events import ProductRemoved
from stockflow.catalogue.product import Product
from stockflow.domain import stockflow
from stockflow.inventory.events import LowStockDetected, StockRestored
from stockflow.inventory.stock import StockRecord


@stockflow.projection
class LowStockReport:
    product_id = Identifier(identifier=True, required=True)
    quantity = Integer(default=0)
    reorder_threshold = Integer(default=10)
    is_critical = Boolean(default=False)  # quantity == 0
    detected_at = DateTime()


@stockflow.projector(projector_for=LowStockReport, aggregates=[StockRecord, Product])
class LowStockReportProjector:
    @on(LowStockDetected)
    def on_low_stock_detected(self, event):
        repo = current_domain.repository_for(LowStockReport)
        try:
            report = repo.get(event.product_id)
            report.quantity = event.quantity
            report.reorder_threshold = event.reorder_threshold
            report.is_critical = event.quantity == 0
            report.detected_at = event.detected_at
        except ObjectNotFoundError:
            report = LowStockReport(
                product_id=event.product_id,
                quantity=event.quantity,
                reorder_threshold=event.reorder_threshold,
                is_critical=event.quantity == 0,
                detected_at=event.detected_at,
            )
        repo.add(report)

    @on(StockRestored)
    def on_stock_restored(self, event):
        """Drop the product from the report once restored stock clears the threshold."""
        repo = current_domain.repository_for(LowStockReport)
        try:
            report = repo.get(event.product_id)
        except ObjectNotFoundError:
            return  # Not in the report

        if event.new_quantity > event.reorder_threshold:
            repo._dao.delete(report)
        else:
            report.quantity = event.new_quantity
            report.is_critical = event.new_quantity == 0
            repo.add(report)

    @on(ProductRemoved)
    def on_product_removed(self, event):
        repo = current_domain.repository_for(LowStockReport)
        try:
            repo._dao.delete(repo.get(event.product_id))
        except ObjectNotFoundError:
            return
