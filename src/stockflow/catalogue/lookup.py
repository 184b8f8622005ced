"""Read-only catalogue checks used by the ordering side."""

from decimal import Decimal

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from stockflow.catalogue.product import Product


def product_exists(product_id) -> bool:
    try:
        current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        return False
    return True


def product_price(product_id) -> Decimal:
    """Current list price. Raises ``ObjectNotFoundError`` for unknown products."""
    return current_domain.repository_for(Product).get(product_id).unit_price
