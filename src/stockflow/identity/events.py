"""Domain events for the User aggregate."""

from protean.fields import DateTime, Identifier, String

from stockflow.domain import stockflow


@stockflow.event(part_of="User")
class UserRegistered:
    """A new account was created."""

    __version__ = 1

    user_id: Identifier(required=True)
    name: String(required=True)
    email: String(required=True)
    role: String(required=True)
    registered_at: DateTime(required=True)


@stockflow.event(part_of="User")
class UserRemoved:
    """An account without orders was deleted."""

    __version__ = 1

    user_id: Identifier(required=True)
    email: String(required=True)
    removed_at: DateTime(required=True)
