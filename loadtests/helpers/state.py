"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state. IDs returned by creation
endpoints are recorded so follow-up requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class BuyerState:
    """One simulated buyer working through a single order."""

    user_id: str | None = None
    order_id: str | None = None
    product_ids: list[str] = field(default_factory=list)
    current_state: str = "entered"
