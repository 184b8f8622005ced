"""Product registration: command and handler."""

from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from stockflow.catalogue.product import Product
from stockflow.domain import logger, stockflow


@stockflow.command(part_of="Product")
class RegisterProduct:
    name: String(required=True, max_length=100)
    description: Text()
    price: String(required=True, max_length=16)


@stockflow.command_handler(part_of=Product)
class RegisterProductHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        product = Product.register(
            name=command.name,
            description=command.description,
            price=command.price,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("product_registered", product_id=str(product.id), price=product.price)
        return str(product.id)
