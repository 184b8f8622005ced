"""List price changes."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from stockflow.catalogue.product import Product
from stockflow.domain import stockflow


@stockflow.command(part_of="Product")
class ChangeProductPrice:
    product_id: Identifier(required=True)
    price: String(required=True, max_length=16)


@stockflow.command_handler(part_of=Product)
class ChangeProductPriceHandler:
    @handle(ChangeProductPrice)
    def change_product_price(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.change_price(command.price)
        repo.add(product)
