# Data access for the users table

from accounts.db.repositories.user_repository import UserRepository

__all__ = ["UserRepository"]
