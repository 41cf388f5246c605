"""
User Model

Document schema for the bundled User resource.

NOTE: `password` is write-only (select=False) so it never appears in
responses, but it is stored exactly as received. hash_password() below is a
placeholder hook that does nothing. Plug a real hasher in before using this
resource for anything that matters.
"""
import enum

from crudforge.models.base import FieldSpec, create_schema

EMAIL_PATTERN = r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$"


class UserRole(str, enum.Enum):
    """Roles a user can hold. Stored only; nothing enforces them."""
    USER = "user"
    ADMIN = "admin"


user_fields = {
    "name": FieldSpec(str, required=True),
    "email": FieldSpec(
        str,
        required=True,
        unique=True,
        match=(EMAIL_PATTERN, "Please provide a valid email"),
    ),
    "password": FieldSpec(str, required=True, select=False),
    "role": FieldSpec(
        str,
        enum=[role.value for role in UserRole],
        default=UserRole.USER.value,
    ),
}

user_schema = create_schema("User", user_fields)


@user_schema.pre_save
def hash_password(document: dict) -> None:
    """
    Password hashing hook.

    INSECURE: intentionally a no-op, the password is saved as plain text.
    Replace the body with a real hash (bcrypt, argon2) to secure it.
    """
    return None
