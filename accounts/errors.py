"""
Error taxonomy surfaced to callers.
Every error carries a ``kind`` and an HTTP-style ``status`` so an outer layer can map it directly.
"""

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, ClassVar


@dataclass(frozen=True)
class FieldError:
    """One failed field of the write contract, e.g. path=".username"."""

    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


class UsersError(Exception):
    """Base class for everything this package raises."""

    kind: ClassVar[str] = "users"
    status: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message: ClassVar[str] = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "status": int(self.status), "message": self.message}


class ValidationError(UsersError):
    """Record failed the shape contract. Holds every field error, in field order."""

    kind = "validation"
    status = HTTPStatus.UNPROCESSABLE_ENTITY
    default_message = "Unprocessable Entity"

    def __init__(self, details: list[FieldError], message: str | None = None):
        super().__init__(message)
        self.details = list(details)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["details"] = [d.to_dict() for d in self.details]
        return payload


class NotFoundError(UsersError):
    """Lookup found zero rows."""

    kind = "not-found"
    status = HTTPStatus.NOT_FOUND
    default_message = "Not Found"
    not_found: ClassVar[bool] = True

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["notFound"] = self.not_found
        return payload


class StorageError(UsersError):
    """Row store fault: connectivity, constraint violation, missing table."""

    kind = "storage"
    default_message = "Storage error"


class HashError(UsersError):
    """Credential primitive failed internally. A password mismatch is not a HashError."""

    kind = "hash"
    default_message = "Credential hashing error"
