"""Contention load test scenarios.

ScarceStockUser instances all buy the same small batch of a "hot" product.
Every payment either withdraws stock or is refused with InsufficientStock;
any other outcome, or a lock timeout, is a failure. When the batch sells
out a fresh hot product is stocked and the race starts again.
"""

from locust import HttpUser, constant_pacing, task

from loadtests.data_generators import line_data, product_data, stock_data, user_data
from loadtests.helpers.response import error_code, extract_error_detail

HOT_BATCH_SIZE = 20


class ScarceStockUser(HttpUser):
    """Many buyers racing for the last units of one product."""

    wait_time = constant_pacing(0.2)

    # Shared by every instance in this worker
    hot_product_id: str | None = None

    def on_start(self):
        with self.client.post("/users", json=user_data(), catch_response=True, name="POST /users") as resp:
            if resp.status_code != 201:
                resp.failure(f"Register user failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.stop()
                return
            self.user_id = resp.json()["user_id"]
        if ScarceStockUser.hot_product_id is None:
            self._restock()

    def _restock(self):
        resp = self.client.post("/products", json=product_data(), name="[HOT] POST /products")
        product_id = resp.json()["product_id"]
        self.client.post(
            "/stock",
            json=stock_data(product_id, quantity=HOT_BATCH_SIZE, reorder_threshold=HOT_BATCH_SIZE // 4),
            name="[HOT] POST /stock",
        )
        ScarceStockUser.hot_product_id = product_id

    @task
    def buy_last_units(self):
        product_id = ScarceStockUser.hot_product_id
        resp = self.client.post("/orders", json={"user_id": self.user_id}, name="[HOT] POST /orders")
        order_id = resp.json()["order_id"]
        self.client.post(
            f"/orders/{order_id}/lines",
            json=line_data(product_id, quantity=1),
            name="[HOT] POST /orders/{id}/lines",
        )

        with self.client.put(
            f"/orders/{order_id}/state",
            json={"target_state": "paid"},
            catch_response=True,
            name="[HOT] PUT /orders/{id}/state [paid]",
        ) as resp:
            if resp.status_code == 200:
                resp.success()
            elif error_code(resp) == "InsufficientStock":
                resp.success()
                if ScarceStockUser.hot_product_id == product_id:
                    self._restock()
            else:
                resp.failure(f"Payment failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def check_stock(self):
        with self.client.get(
            f"/stock/{ScarceStockUser.hot_product_id}", catch_response=True, name="[HOT] GET /stock/{id}"
        ) as resp:
            if resp.status_code == 200 and resp.json()["quantity"] < 0:
                resp.failure("Stock went negative")
