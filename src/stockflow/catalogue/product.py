"""Product aggregate: what can be sold and at what list price."""

from datetime import UTC, datetime
from decimal import Decimal

from protean import invariant
from protean.fields import DateTime, String, Text

from stockflow.catalogue.events import ProductPriceChanged, ProductRegistered, ProductRemoved
from stockflow.domain import stockflow
from stockflow.shared.money import format_amount, parse_amount


@stockflow.aggregate
class Product:
    """A sellable item.

    ``price`` holds an exact decimal rendered as text with two fractional
    digits. Order lines copy it when they are created; later price changes
    never reach existing lines.
    """

    name: String(required=True, max_length=100)
    description: Text()
    price: String(required=True, max_length=16)
    created_at: DateTime(default=datetime.now)

    @invariant.post
    def price_must_be_a_valid_amount(self):
        parse_amount(self.price)

    @property
    def unit_price(self) -> Decimal:
        return parse_amount(self.price)

    @classmethod
    def register(cls, name, price, description=None):
        price = format_amount(parse_amount(price))
        now = datetime.now(UTC)

        product = cls(name=name, description=description, price=price, created_at=now)
        product.raise_(
            ProductRegistered(
                product_id=product.id,
                name=name,
                price=price,
                created_at=now,
            )
        )
        return product

    def change_price(self, new_price):
        new_price = format_amount(parse_amount(new_price))
        previous_price = self.price
        self.price = new_price

        self.raise_(
            ProductPriceChanged(
                product_id=self.id,
                previous_price=previous_price,
                new_price=new_price,
                changed_at=datetime.now(UTC),
            )
        )

    def remove(self):
        self.raise_(ProductRemoved(product_id=self.id, removed_at=datetime.now(UTC)))
