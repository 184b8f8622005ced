"""StockRecord aggregate: the stock ledger row for one product.

One record per product, keyed by the product's identity. ``quantity`` is the
number of sellable units and never goes negative. Records are mutated only by
the order state transition engine, which holds the record's row lock while it
does so (see ``stockflow.inventory.locks``).
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer

from stockflow.domain import stockflow
from stockflow.exceptions import InsufficientStock
from stockflow.inventory.events import LowStockDetected, StockInitialized, StockRestored, StockWithdrawn

DEFAULT_REORDER_THRESHOLD = 10


@stockflow.aggregate
class StockRecord:
    product_id = Identifier(identifier=True, required=True)
    quantity = Integer(required=True, min_value=0)
    reorder_threshold = Integer(default=DEFAULT_REORDER_THRESHOLD, min_value=0)
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, product_id, quantity, reorder_threshold=DEFAULT_REORDER_THRESHOLD):
        if quantity is None or quantity < 0:
            raise ValidationError({"quantity": ["Quantity must not be negative"]})
        if reorder_threshold is None or reorder_threshold < 0:
            raise ValidationError({"reorder_threshold": ["Reorder threshold must not be negative"]})

        now = datetime.now(UTC)
        record = cls(
            product_id=str(product_id),
            quantity=quantity,
            reorder_threshold=reorder_threshold,
            updated_at=now,
        )
        record.raise_(
            StockInitialized(
                product_id=str(product_id),
                quantity=quantity,
                reorder_threshold=reorder_threshold,
                initialized_at=now,
            )
        )
        return record

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def ensure_available(self, quantity):
        """Raise InsufficientStock unless ``quantity`` units can be withdrawn."""
        if self.quantity < quantity:
            raise InsufficientStock(str(self.product_id), requested=quantity, available=self.quantity)

    def _check_low_stock(self, order_id=None):
        """Raise LowStockDetected if quantity is at or below the reorder threshold."""
        if self.quantity <= self.reorder_threshold:
            self.raise_(
                LowStockDetected(
                    product_id=str(self.product_id),
                    order_id=order_id,
                    quantity=self.quantity,
                    reorder_threshold=self.reorder_threshold,
                    detected_at=datetime.now(UTC),
                )
            )

    # -------------------------------------------------------------------
    # Movements
    # -------------------------------------------------------------------
    def withdraw(self, quantity, order_id):
        """Take ``quantity`` units out for a paid order."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        self.ensure_available(quantity)

        previous = self.quantity
        now = datetime.now(UTC)
        self.quantity = previous - quantity
        self.updated_at = now

        self.raise_(
            StockWithdrawn(
                product_id=str(self.product_id),
                order_id=str(order_id),
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.quantity,
                withdrawn_at=now,
            )
        )
        self._check_low_stock(order_id=str(order_id))

    def restore(self, quantity, order_id):
        """Put ``quantity`` units back after a paid order was cancelled. No upper bound."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        previous = self.quantity
        now = datetime.now(UTC)
        self.quantity = previous + quantity
        self.updated_at = now

        self.raise_(
            StockRestored(
                product_id=str(self.product_id),
                order_id=str(order_id),
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.quantity,
                reorder_threshold=self.reorder_threshold,
                restored_at=now,
            )
        )

    @property
    def is_low(self) -> bool:
        return self.quantity <= self.reorder_threshold
