"""Application tests for the read-only reports."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from protean.exceptions import ObjectNotFoundError
from stockflow import service
from stockflow.reporting import queries


@pytest.fixture()
def sales(make_user, make_product):
    """Two buyers, three products; only paid orders count as sales."""
    ana = make_user(name="Ana")
    bruno = make_user(name="Bruno")
    laptop = make_product(name="Laptop", price="5000.00", quantity=20, reorder_threshold=2)
    mouse = make_product(name="Mouse", price="25.50", quantity=100, reorder_threshold=10)
    chair = make_product(name="Chair", price="150.00", quantity=5, reorder_threshold=10)

    def order(user, *lines, state="paid"):
        order_id = service.create_order(user)
        for product_id, quantity in lines:
            service.add_or_merge_line(order_id, product_id, quantity)
        if state != "entered":
            service.transition_state(order_id, state)
        return order_id

    first = order(ana, (laptop, 1), (mouse, 2))
    order(ana, (mouse, 4))
    order(bruno, (laptop, 2))
    order(bruno, (mouse, 50), state="awaiting_payment")
    order(bruno, (chair, 1), state="entered")

    return {
        "ana": ana,
        "bruno": bruno,
        "laptop": laptop,
        "mouse": mouse,
        "chair": chair,
        "first_order": first,
    }


class TestOrderTotal:
    def test_total_uses_line_snapshots(self, sales):
        assert queries.order_total(sales["first_order"]) == Decimal("5051.00")

    def test_unknown_order(self):
        with pytest.raises(ObjectNotFoundError):
            queries.order_total("no-such-order")


class TestLowStock:
    def test_most_critical_first(self, sales):
        rows = queries.low_stock()
        assert [row["name"] for row in rows] == ["Chair"]
        assert rows[0]["quantity"] == 5
        assert rows[0]["reorder_threshold"] == 10

    def test_ordering_by_quantity(self, make_product):
        make_product(name="A", quantity=7, reorder_threshold=10)
        make_product(name="B", quantity=0, reorder_threshold=10)
        make_product(name="C", quantity=3, reorder_threshold=10)
        assert [row["name"] for row in queries.low_stock()] == ["B", "C", "A"]


class TestBestSellers:
    def test_only_paid_orders_count(self, sales):
        rows = queries.best_sellers()
        assert [row["name"] for row in rows] == ["Mouse", "Laptop"]
        assert rows[0]["units_sold"] == 6
        assert rows[0]["revenue"] == Decimal("153.00")
        assert rows[1]["units_sold"] == 3
        assert rows[1]["revenue"] == Decimal("15000.00")

    def test_limit(self, sales):
        assert len(queries.best_sellers(limit=1)) == 1


class TestTopCustomers:
    def test_ranked_by_total_spent(self, sales):
        rows = queries.top_customers()
        assert [row["name"] for row in rows] == ["Bruno", "Ana"]

        bruno, ana = rows
        assert bruno["order_count"] == 1
        assert bruno["total_spent"] == Decimal("10000.00")
        assert ana["order_count"] == 2
        assert ana["total_spent"] == Decimal("5153.00")
        assert ana["average_order"] == Decimal("2576.50")


class TestMonthlySales:
    def test_current_month_bucket(self, sales):
        rows = queries.monthly_sales()
        now = datetime.now(UTC)
        assert rows == [
            {
                "month": f"{now.month:02d}-{now.year}",
                "order_count": 3,
                "revenue": Decimal("15153.00"),
            }
        ]

    def test_no_sales(self):
        assert queries.monthly_sales() == []


class TestProductListing:
    def test_listing_includes_stock(self, sales):
        listing = {row["name"]: row for row in queries.product_listing()}
        assert listing["Laptop"]["stock"] == 17
        assert listing["Laptop"]["price"] == Decimal("5000.00")

    def test_search_is_case_insensitive(self, sales):
        assert [row["name"] for row in queries.search_products("LAP")] == ["Laptop"]


@pytest.mark.slow
class TestReportsCoverEveryRow:
    """Reports read whole tables, not the repository's default page."""

    def test_more_than_a_hundred_paid_orders(self, user_id, make_product):
        widget = make_product(name="Widget", price="1.00", quantity=1000, reorder_threshold=0)
        for _ in range(101):
            order_id = service.create_order(user_id)
            service.add_or_merge_line(order_id, widget, 1)
            service.transition_state(order_id, "paid")

        assert service.get_stock(widget)["quantity"] == 899

        best = queries.best_sellers()
        assert best[0]["units_sold"] == 101
        assert best[0]["revenue"] == Decimal("101.00")

        customer = queries.top_customers()[0]
        assert customer["order_count"] == 101
        assert customer["total_spent"] == Decimal("101.00")

        assert sum(row["order_count"] for row in queries.monthly_sales()) == 101

    def test_more_than_a_hundred_products(self, make_product):
        for index in range(101):
            make_product(name=f"Part {index:03d}", price="2.00", quantity=1, reorder_threshold=10)

        assert len(queries.product_listing()) == 101
        assert len(queries.search_products("part")) == 101
        assert len(queries.low_stock()) == 101
