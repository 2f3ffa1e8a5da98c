"""User accounts: validated, hashed credential storage over an async SQL engine."""

from accounts.errors import FieldError, HashError, NotFoundError, StorageError, UsersError, ValidationError
from accounts.schemas.user import UserRecord
from accounts.services.user_service import Users, build_users

__all__ = [
    "build_users",
    "Users",
    "UserRecord",
    "UsersError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "HashError",
    "FieldError",
]
