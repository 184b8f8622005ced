"""User registration: command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from stockflow.domain import logger, stockflow
from stockflow.identity.user import User, UserRole
from stockflow.shared.email import normalize_email


@stockflow.command(part_of="User")
class RegisterUser:
    """Create a new account."""

    name: String(required=True, max_length=100)
    email: String(required=True, max_length=254)
    role: String(choices=UserRole, default=UserRole.CUSTOMER.value)


@stockflow.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        repo = current_domain.repository_for(User)
        email = normalize_email(command.email)
        if repo._dao.query.filter(email=email).all().items:
            raise ValidationError({"email": [f"A user with email {email} already exists"]})

        user = User.register(name=command.name, email=email, role=command.role)
        repo.add(user)
        logger.info("user_registered", user_id=str(user.id), role=user.role)
        return str(user.id)
