"""Read-only account checks used by the ordering side."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from stockflow.identity.user import User


def user_exists(user_id) -> bool:
    try:
        current_domain.repository_for(User).get(user_id)
    except ObjectNotFoundError:
        return False
    return True
