"""User aggregate: the account that owns orders.

Authentication is handled elsewhere; the core only needs to know that a
buyer exists and how to reach them.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, String

from stockflow.domain import stockflow
from stockflow.identity.events import UserRegistered, UserRemoved
from stockflow.shared.email import normalize_email


class UserRole(Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"


@stockflow.aggregate
class User:
    name: String(required=True, max_length=100)
    email: String(required=True, max_length=254, unique=True)
    role: String(choices=UserRole, default=UserRole.CUSTOMER.value)
    registered_at: DateTime(default=datetime.now)

    @classmethod
    def register(cls, name, email, role=UserRole.CUSTOMER.value):
        email = normalize_email(email)
        now = datetime.now(UTC)

        user = cls(name=name, email=email, role=role, registered_at=now)
        user.raise_(
            UserRegistered(
                user_id=user.id,
                name=name,
                email=email,
                role=user.role,
                registered_at=now,
            )
        )
        return user

    def remove(self):
        self.raise_(
            UserRemoved(
                user_id=self.id,
                email=self.email,
                removed_at=datetime.now(UTC),
            )
        )
