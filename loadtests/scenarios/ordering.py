"""Ordering load test scenarios.

A stateful SequentialTaskSet journey covering the whole order lifecycle:
register a buyer, stock a few products, fill a cart (with a repeat add
that merges), pay, and sometimes cancel to put the stock back.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import line_data, product_data, stock_data, user_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import BuyerState


class CheckoutJourney(SequentialTaskSet):
    """Register -> Stock products -> Create order -> Add lines -> Pay -> (Cancel)."""

    def on_start(self):
        self.state = BuyerState()

    @task
    def register_buyer(self):
        with self.client.post("/users", json=user_data(), catch_response=True, name="POST /users") as resp:
            if resp.status_code == 201:
                self.state.user_id = resp.json()["user_id"]
            else:
                resp.failure(f"Register user failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def stock_products(self):
        for _ in range(random.randint(1, 4)):
            with self.client.post(
                "/products", json=product_data(), catch_response=True, name="POST /products"
            ) as resp:
                if resp.status_code != 201:
                    resp.failure(f"Register product failed: {resp.status_code}: {extract_error_detail(resp)}")
                    self.interrupt()
                product_id = resp.json()["product_id"]

            with self.client.post(
                "/stock", json=stock_data(product_id), catch_response=True, name="POST /stock"
            ) as resp:
                if resp.status_code == 201:
                    self.state.product_ids.append(product_id)
                else:
                    resp.failure(f"Initialize stock failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def create_order(self):
        with self.client.post(
            "/orders", json={"user_id": self.state.user_id}, catch_response=True, name="POST /orders"
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order_id"]
            else:
                resp.failure(f"Create order failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_lines(self):
        # The first product is added twice so the merge rule is exercised.
        product_ids = self.state.product_ids + self.state.product_ids[:1]
        for product_id in product_ids:
            with self.client.post(
                f"/orders/{self.state.order_id}/lines",
                json=line_data(product_id),
                catch_response=True,
                name="POST /orders/{id}/lines",
            ) as resp:
                if resp.status_code != 201:
                    resp.failure(f"Add line failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def pay(self):
        self._move("paid")

    @task
    def maybe_cancel(self):
        if self.state.current_state == "paid" and random.random() < 0.3:
            self._move("cancelled")

    @task
    def view_order(self):
        self.client.get(f"/orders/{self.state.order_id}", name="GET /orders/{id}")

    @task
    def done(self):
        self.interrupt()

    def _move(self, target_state):
        with self.client.put(
            f"/orders/{self.state.order_id}/state",
            json={"target_state": target_state},
            catch_response=True,
            name=f"PUT /orders/{{id}}/state [{target_state}]",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_state = target_state
            else:
                resp.failure(f"Transition to {target_state} failed: {resp.status_code}: {extract_error_detail(resp)}")


class OrderingUser(HttpUser):
    """Buyer working through complete checkouts."""

    tasks = [CheckoutJourney]
    wait_time = between(1, 3)
