"""User write/read schemas - the shape contract and the materialized record."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictInt

# Letters and digits only, anchored: the whole password must match.
PASSWORD_PATTERN = r"^[a-zA-Z0-9]+$"


class UserWrite(BaseModel):
    """Input for put(). No id inserts a new row, an id updates that row."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: Annotated[StrictInt, Field(gt=0)] | None = None
    username: str = Field(..., min_length=1, strict=True)
    password: str = Field(
        ..., min_length=3, max_length=30, pattern=PASSWORD_PATTERN, strict=True, repr=False
    )


class Credentials(BaseModel):
    """Input for authenticate(). Any string password is accepted; mismatches are a False result."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    username: str = Field(..., strict=True)
    password: str = Field(..., strict=True, repr=False)


class UserRecord(BaseModel):
    """A user row as materialized from the store.

    ``password`` is never read from storage: put() copies the caller's plaintext
    onto its result for convenience, every read leaves it as None.
    """

    id: int
    username: str
    hash: str = Field(repr=False)
    salt: str | None = Field(default=None, repr=False)
    password: str | None = Field(default=None, repr=False)
