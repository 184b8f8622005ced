"""Typed failures raised by the stockflow core.

Malformed input is reported with Protean's ``ValidationError`` and unknown
identities with ``ObjectNotFoundError``; everything below describes a request
that was well-formed but could not be honoured. Each failure aborts the unit
of work it is raised in.
"""


class StockflowError(Exception):
    """Base class for stockflow failures. ``status_code`` is the HTTP mapping."""

    status_code = 409

    def to_dict(self) -> dict:
        return {"error": str(self), "code": type(self).__name__}


class InvalidTransition(StockflowError):
    """The order lifecycle does not allow moving from ``current`` to ``target``."""

    def __init__(self, current: str, target: str, reason: str | None = None):
        self.current = current
        self.target = target
        self.reason = reason
        message = f"Cannot transition order from {current} to {target}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InsufficientStock(StockflowError):
    """A line asks for more units than the product's stock record holds."""

    def __init__(self, product_id: str, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient stock for product {product_id}: requested {requested}, available {available}")

    def to_dict(self) -> dict:
        return {
            "error": str(self),
            "code": type(self).__name__,
            "product_id": self.product_id,
            "requested": self.requested,
            "available": self.available,
        }


class InventoryInconsistency(StockflowError):
    """An order line references a product that has no stock record."""

    status_code = 500

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"No stock record exists for product {product_id}")


class ConcurrencyTimeout(StockflowError):
    """A row lock could not be acquired within the configured wait."""

    status_code = 503

    def __init__(self, key: tuple, timeout: float):
        self.key = key
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout}s waiting for lock on {key[0]} {key[1]}")


class ReferentialIntegrityError(StockflowError):
    """A delete was refused because other records still reference the target."""

    def __init__(self, kind: str, identifier: str, referenced_by: str):
        self.kind = kind
        self.identifier = identifier
        self.referenced_by = referenced_by
        super().__init__(f"Cannot delete {kind} {identifier}: still referenced by {referenced_by}")


class LockNotHeld(StockflowError):
    """A stock-affecting transition was dispatched without holding its row locks."""

    status_code = 500

    def __init__(self, keys: list):
        self.keys = keys
        super().__init__(f"Transition requires locks that the current thread does not hold: {keys}")
