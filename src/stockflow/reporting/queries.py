"""Read-only reports over products, stock and historical orders.

Sales figures only count paid orders and always use the prices captured on
the order lines, never the current list price.
"""

from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from stockflow.catalogue.product import Product
from stockflow.identity.user import User
from stockflow.inventory.stock import StockRecord
from stockflow.ordering.order import Order, OrderState
from stockflow.shared.money import CENTS, ZERO


def _paid_orders():
    return current_domain.repository_for(Order)._dao.query.filter(state=OrderState.PAID.value).limit(None).all().items


def _product_name(product_id):
    try:
        return current_domain.repository_for(Product).get(product_id).name
    except ObjectNotFoundError:
        return None


def product_listing() -> list[dict]:
    """Every product with its list price and current stock (None if not stocked)."""
    products = current_domain.repository_for(Product)._dao.query.limit(None).all().items
    stock_repo = current_domain.repository_for(StockRecord)

    listing = []
    for product in sorted(products, key=lambda p: p.name.lower()):
        try:
            quantity = stock_repo.get(product.id).quantity
        except ObjectNotFoundError:
            quantity = None
        listing.append(
            {
                "product_id": str(product.id),
                "name": product.name,
                "price": product.unit_price,
                "stock": quantity,
            }
        )
    return listing


def search_products(term: str) -> list[dict]:
    """Case-insensitive substring match on product name."""
    needle = term.lower()
    return [item for item in product_listing() if needle in item["name"].lower()]


def order_total(order_id) -> Decimal:
    """Sum of line subtotals. Raises ``ObjectNotFoundError`` for unknown orders."""
    return current_domain.repository_for(Order).get(order_id).total


def low_stock() -> list[dict]:
    """Products at or below their reorder threshold, most critical first."""
    records = current_domain.repository_for(StockRecord)._dao.query.limit(None).all().items
    rows = [
        {
            "product_id": str(record.product_id),
            "name": _product_name(record.product_id),
            "quantity": record.quantity,
            "reorder_threshold": record.reorder_threshold,
        }
        for record in records
        if record.is_low
    ]
    return sorted(rows, key=lambda row: (row["quantity"], row["product_id"]))


def best_sellers(limit: int = 10) -> list[dict]:
    """Units sold and revenue per product over paid orders, by units descending."""
    units = defaultdict(int)
    revenue = defaultdict(lambda: ZERO)

    for order in _paid_orders():
        for line in order.lines:
            product_id = str(line.product_id)
            units[product_id] += line.quantity
            revenue[product_id] += line.subtotal

    rows = [
        {
            "product_id": product_id,
            "name": _product_name(product_id),
            "units_sold": units[product_id],
            "revenue": revenue[product_id],
        }
        for product_id in units
    ]
    rows.sort(key=lambda row: (-row["units_sold"], -row["revenue"], row["product_id"]))
    return rows[:limit]


def top_customers(limit: int = 10) -> list[dict]:
    """Order count, total spent and average per order for each buyer, by total spent descending."""
    order_counts = defaultdict(int)
    spent = defaultdict(lambda: ZERO)

    for order in _paid_orders():
        user_id = str(order.user_id)
        order_counts[user_id] += 1
        spent[user_id] += order.total

    user_repo = current_domain.repository_for(User)
    rows = []
    for user_id, count in order_counts.items():
        try:
            name = user_repo.get(user_id).name
        except ObjectNotFoundError:
            name = None
        rows.append(
            {
                "user_id": user_id,
                "name": name,
                "order_count": count,
                "total_spent": spent[user_id],
                "average_order": (spent[user_id] / count).quantize(CENTS, rounding=ROUND_HALF_UP),
            }
        )
    rows.sort(key=lambda row: (-row["total_spent"], row["user_id"]))
    return rows[:limit]


def monthly_sales() -> list[dict]:
    """Paid orders and gross revenue per ``MM-YYYY`` month of order creation, newest first."""
    buckets = defaultdict(lambda: {"order_count": 0, "revenue": ZERO})

    for order in _paid_orders():
        bucket = buckets[(order.created_at.year, order.created_at.month)]
        bucket["order_count"] += 1
        bucket["revenue"] += order.total

    return [
        {"month": f"{month:02d}-{year}", **buckets[(year, month)]}
        for year, month in sorted(buckets, reverse=True)
    ]
