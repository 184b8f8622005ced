"""Domain events for the Product aggregate.

Prices are carried as decimal strings ("5000.00").
"""

from protean.fields import DateTime, Identifier, String

from stockflow.domain import stockflow


@stockflow.event(part_of="Product")
class ProductRegistered:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    price: String(required=True)
    created_at: DateTime(required=True)


@stockflow.event(part_of="Product")
class ProductPriceChanged:
    """The list price changed. Existing order lines keep their snapshot."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_price: String(required=True)
    new_price: String(required=True)
    changed_at: DateTime(required=True)


@stockflow.event(part_of="Product")
class ProductRemoved:
    """A product with no order lines was deleted together with its stock record."""

    __version__ = 1

    product_id: Identifier(required=True)
    removed_at: DateTime(required=True)
