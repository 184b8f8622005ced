"""Faker-based data generators for Locust load test scenarios.

Payloads pass the domain's validation rules (email format, two-decimal
prices) and use the field names of the API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()


def valid_email() -> str:
    """Unique address: one @, a dotted domain, no spaces."""
    local = fake.user_name()[:20]
    domain = fake.free_email_domain()
    return f"{local}.{uuid.uuid4().hex[:6]}@{domain}"


def user_data() -> dict:
    return {"name": fake.name()[:50], "email": valid_email()}


def price() -> str:
    return f"{random.randint(1, 5000)}.{random.randint(0, 99):02d}"


def product_data() -> dict:
    return {
        "name": f"{fake.word().title()} {uuid.uuid4().hex[:4]}",
        "description": fake.sentence(),
        "price": price(),
    }


def stock_data(product_id: str, quantity: int | None = None, reorder_threshold: int = 10) -> dict:
    return {
        "product_id": product_id,
        "quantity": quantity if quantity is not None else random.randint(20, 500),
        "reorder_threshold": reorder_threshold,
    }


def line_data(product_id: str, quantity: int | None = None) -> dict:
    return {"product_id": product_id, "quantity": quantity or random.randint(1, 5)}
