"""Tests for the User aggregate."""

import pytest
from protean.exceptions import ValidationError
from stockflow.identity.events import UserRegistered
from stockflow.identity.user import User, UserRole


class TestUserRegistration:
    def test_register_defaults_to_customer(self):
        user = User.register(name="Ana Pérez", email="ana@example.com")
        assert user.role == UserRole.CUSTOMER.value
        assert user.registered_at is not None

    def test_register_admin(self):
        user = User.register(name="Admin", email="admin@example.com", role=UserRole.ADMIN.value)
        assert user.role == "admin"

    def test_email_is_normalized(self):
        user = User.register(name="Ana", email="  Ana@Example.COM ")
        assert user.email == "ana@example.com"

    def test_register_raises_event(self):
        user = User.register(name="Ana", email="ana@example.com")
        registered = [e for e in user._events if isinstance(e, UserRegistered)]
        assert len(registered) == 1
        assert registered[0].email == "ana@example.com"

    @pytest.mark.parametrize(
        "email",
        ["no-at-sign", "two@@example.com", "ana@localhost", ".ana@example.com", "ana@-example.com", "a b@example.com"],
    )
    def test_malformed_email_rejected(self, email):
        with pytest.raises(ValidationError):
            User.register(name="Ana", email=email)

    def test_unknown_role_rejected(self):
        with pytest.raises(ValidationError):
            User.register(name="Ana", email="ana@example.com", role="superuser")
