"""Order aggregate: header, lifecycle state and line items.

State machine:
    ENTERED → AWAITING_PAYMENT → PAID
    ENTERED → PAID
    ENTERED, AWAITING_PAYMENT, PAID → CANCELLED

Lines can only be added while the order is ENTERED. Adding a product that is
already on the order merges into the existing line: quantities add up and the
first unit price captured is kept.

Entering PAID withdraws stock for every line; PAID → CANCELLED puts it back.
The aggregate only decides *which* stock effect a transition has; the
transition handler applies it to the stock records in the same unit of work.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from stockflow.domain import stockflow
from stockflow.exceptions import InvalidTransition, ReferentialIntegrityError
from stockflow.ordering.events import (
    OrderCreated,
    OrderDiscarded,
    OrderLineAdded,
    OrderLineMerged,
    OrderStateChanged,
)
from stockflow.shared.money import ZERO, format_amount, line_subtotal


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderState(Enum):
    ENTERED = "entered"
    AWAITING_PAYMENT = "awaiting_payment"
    PAID = "paid"
    CANCELLED = "cancelled"


class StockEffect(Enum):
    NONE = "none"
    WITHDRAW = "withdraw"
    RESTORE = "restore"


_VALID_TRANSITIONS = {
    OrderState.ENTERED: {OrderState.AWAITING_PAYMENT, OrderState.PAID, OrderState.CANCELLED},
    OrderState.AWAITING_PAYMENT: {OrderState.PAID, OrderState.CANCELLED},
    OrderState.PAID: {OrderState.CANCELLED},  # Refund/return
    OrderState.CANCELLED: set(),  # Terminal
}


def stock_effect(current: OrderState, target: OrderState) -> StockEffect:
    """Stock movement implied by a (permitted) transition."""
    if target is OrderState.PAID:
        return StockEffect.WITHDRAW
    if current is OrderState.PAID and target is OrderState.CANCELLED:
        return StockEffect.RESTORE
    return StockEffect.NONE


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@stockflow.entity(part_of="Order")
class OrderLine:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price_snapshot = String(required=True, max_length=16)  # Decimal text, fixed at creation
    added_at = DateTime()

    def __setattr__(self, name, value):
        if name == "unit_price_snapshot" and getattr(self, "_initialized", False):
            current = getattr(self, name, None)
            if current is not None and value != current:
                raise ValidationError({"unit_price_snapshot": ["The price captured on a line cannot be changed"]})
        super().__setattr__(name, value)

    @property
    def unit_price(self) -> Decimal:
        return Decimal(self.unit_price_snapshot)

    @property
    def subtotal(self) -> Decimal:
        return line_subtotal(self.quantity, self.unit_price)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@stockflow.aggregate
class Order:
    user_id = Identifier(required=True)
    state = String(choices=OrderState, default=OrderState.ENTERED.value)
    lines = HasMany(OrderLine)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_line_per_product(self):
        product_ids = [str(line.product_id) for line in self.lines]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"lines": ["An order can hold only one line per product"]})

    @invariant.post
    def paid_order_must_have_lines(self):
        if self.state == OrderState.PAID.value and not self.lines:
            raise ValidationError({"lines": ["A paid order must have at least one line"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        order = cls(
            user_id=str(user_id),
            state=OrderState.ENTERED.value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(OrderCreated(order_id=str(order.id), user_id=str(user_id), created_at=now))
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def line_for(self, product_id):
        return next((line for line in self.lines if str(line.product_id) == str(product_id)), None)

    def product_ids(self) -> list[str]:
        """Products on the order in ascending identity (stock lock order)."""
        return sorted(str(line.product_id) for line in self.lines)

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), ZERO)

    # -------------------------------------------------------------------
    # Cart merge rule (only in ENTERED state)
    # -------------------------------------------------------------------
    def add_or_merge_line(self, product_id, quantity, unit_price):
        """Add ``quantity`` of a product, merging into an existing line. Returns the line id."""
        if OrderState(self.state) != OrderState.ENTERED:
            raise ValidationError({"state": [f"Lines can only be added to an entered order, not {self.state}"]})
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        now = datetime.now(UTC)
        existing = self.line_for(product_id)

        if existing:
            existing.quantity += quantity
            self.updated_at = now
            self.raise_(
                OrderLineMerged(
                    order_id=str(self.id),
                    line_id=str(existing.id),
                    product_id=str(product_id),
                    added_quantity=quantity,
                    new_quantity=existing.quantity,
                    unit_price_snapshot=existing.unit_price_snapshot,
                )
            )
            return str(existing.id)

        line = OrderLine(
            product_id=str(product_id),
            quantity=quantity,
            unit_price_snapshot=format_amount(unit_price),
            added_at=now,
        )
        self.add_lines(line)
        self.updated_at = now
        self.raise_(
            OrderLineAdded(
                order_id=str(self.id),
                line_id=str(line.id),
                product_id=str(product_id),
                quantity=quantity,
                unit_price_snapshot=line.unit_price_snapshot,
                added_at=now,
            )
        )
        return str(line.id)

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def plan_transition(self, target) -> StockEffect:
        """Validate a move to ``target`` and return its stock effect, without changing anything."""
        current = OrderState(self.state)
        target = OrderState(target)

        if target is current:
            raise InvalidTransition(current.value, target.value, "order is already in that state")
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(current.value, target.value)
        if target is OrderState.PAID and not self.lines:
            raise InvalidTransition(current.value, target.value, "order has no lines")

        return stock_effect(current, target)

    def transition_to(self, target) -> StockEffect:
        effect = self.plan_transition(target)
        target = OrderState(target)
        previous = self.state
        now = datetime.now(UTC)

        self.state = target.value
        self.updated_at = now
        self.raise_(
            OrderStateChanged(
                order_id=str(self.id),
                user_id=str(self.user_id),
                previous_state=previous,
                new_state=target.value,
                stock_effect=effect.value,
                changed_at=now,
            )
        )
        return effect

    def discard(self):
        """Mark an order without lines for deletion."""
        if self.lines:
            raise ReferentialIntegrityError("order", str(self.id), f"{len(self.lines)} line(s)")
        self.raise_(OrderDiscarded(order_id=str(self.id), discarded_at=datetime.now(UTC)))
