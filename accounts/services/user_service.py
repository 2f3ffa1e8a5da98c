"""
User service - the public operations of the credential store.
Challenge: Compose validation, hashing and persistence with one connection per call.
Design: Each operation is a Pipeline of small steps; hashing runs in a worker thread.
"""

import logging
from dataclasses import dataclass
from typing import Any

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from accounts.config import Settings, get_settings
from accounts.core.hashing import CredentialHasher, DerivedCredential, hasher_from_settings
from accounts.core.validation import validate_credentials, validate_user, write_json_schema
from accounts.db import schema
from accounts.db.base import build_users_table
from accounts.db.repositories.user_repository import Row, UserRepository
from accounts.db.session import create_engine_from_settings, create_session_maker
from accounts.errors import NotFoundError
from accounts.schemas.user import Credentials, UserRecord, UserWrite
from accounts.services.pipeline import Pipeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingWrite:
    user: UserWrite
    credential: DerivedCredential


@dataclass(frozen=True)
class WriteResult:
    rows: list[Row]
    # Caller's plaintext, carried only to be echoed on the put() result
    password: str


@dataclass(frozen=True)
class CredentialLookup:
    rows: list[Row]
    credentials: Credentials


@dataclass(frozen=True)
class CredentialMatch:
    user: UserRecord
    credentials: Credentials


def _first(rows: list[Row]) -> UserRecord:
    if not rows:
        raise NotFoundError("User not found")
    return UserRecord.model_validate(rows[0])


class Users:
    """Credential store over one users table.

    Holds only immutable state: the engine (and its pool), the hasher and the
    table definition. Every operation borrows its own session.
    """

    def __init__(self, engine: AsyncEngine, hasher: CredentialHasher, table_name: str = "users"):
        self.engine = engine
        self.hasher = hasher
        self.table = build_users_table(MetaData(), with_salt=hasher.requires_salt, name=table_name)
        session_maker = create_session_maker(engine)

        self._put = Pipeline("put", session_maker, self._validate, self._derive, self._write, self._first_written)
        self._get_by_id = Pipeline("get_by_id", session_maker, self._select_by_id, self._first_row)
        self._get_by_username = Pipeline(
            "get_by_username", session_maker, self._select_by_username, self._first_row
        )
        self._authenticate = Pipeline(
            "authenticate",
            session_maker,
            self._validate_credentials,
            self._query_for_hash,
            self._first_credential,
            self._match_hash,
        )

    @property
    def json_schema(self) -> dict[str, Any]:
        """JSON Schema of the put() contract."""
        return write_json_schema()

    async def create_schema(self) -> None:
        await schema.create_schema(self.engine, self.table)

    async def drop_schema(self) -> None:
        await schema.drop_schema(self.engine, self.table)

    async def put(self, record: Any) -> UserRecord:
        """Insert (no id) or update (with id) a user. Returns the written row.

        The returned ``password`` is the caller's own plaintext echoed back; it is
        never stored and never read back from the store.
        """
        return await self._put(record)

    async def get_by_id(self, id: int) -> UserRecord:
        return await self._get_by_id(id)

    async def get_by_username(self, username: str) -> UserRecord:
        return await self._get_by_username(username)

    async def authenticate(self, credentials: Any) -> bool:
        """True if the password matches. Unknown username raises NotFoundError."""
        return await self._authenticate(credentials)

    async def end(self) -> None:
        """Close the pool. Not safe while operations are in flight."""
        await self.engine.dispose()

    async def __aenter__(self) -> "Users":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.end()

    # put steps

    async def _validate(self, session: AsyncSession, record: Any) -> UserWrite:
        return validate_user(record)

    async def _derive(self, session: AsyncSession, user: UserWrite) -> PendingWrite:
        credential = await run_in_threadpool(self.hasher.derive, user.password)
        return PendingWrite(user=user, credential=credential)

    async def _write(self, session: AsyncSession, pending: PendingWrite) -> WriteResult:
        repo = UserRepository(session, self.table)
        user, credential = pending.user, pending.credential
        if user.id:
            rows = await repo.update(user.id, user.username, credential.hash, credential.salt)
        else:
            rows = await repo.insert(user.username, credential.hash, credential.salt)
        return WriteResult(rows=rows, password=user.password)

    async def _first_written(self, session: AsyncSession, written: WriteResult) -> UserRecord:
        # Zero rows only happens when updating an id that does not exist.
        record = _first(written.rows)
        return record.model_copy(update={"password": written.password})

    # lookup steps

    async def _select_by_id(self, session: AsyncSession, id: int) -> list[Row]:
        return await UserRepository(session, self.table).select_by_id(id)

    async def _select_by_username(self, session: AsyncSession, username: str) -> list[Row]:
        return await UserRepository(session, self.table).select_by_username(username)

    async def _first_row(self, session: AsyncSession, rows: list[Row]) -> UserRecord:
        return _first(rows)

    # authenticate steps

    async def _validate_credentials(self, session: AsyncSession, credentials: Any) -> Credentials:
        return validate_credentials(credentials)

    async def _query_for_hash(self, session: AsyncSession, credentials: Credentials) -> CredentialLookup:
        rows = await UserRepository(session, self.table).select_by_username(credentials.username)
        return CredentialLookup(rows=rows, credentials=credentials)

    async def _first_credential(self, session: AsyncSession, lookup: CredentialLookup) -> CredentialMatch:
        return CredentialMatch(user=_first(lookup.rows), credentials=lookup.credentials)

    async def _match_hash(self, session: AsyncSession, match: CredentialMatch) -> bool:
        valid = await run_in_threadpool(
            self.hasher.verify, match.credentials.password, match.user.hash, match.user.salt
        )
        if not valid:
            logger.debug("authenticate: password mismatch for user id=%s", match.user.id)
        return valid


def build_users(
    database_url: str | None = None,
    *,
    settings: Settings | None = None,
    hasher: CredentialHasher | None = None,
    **engine_options: Any,
) -> Users:
    """Single entry point: connection URL in, credential store out."""
    settings = settings or get_settings()
    hasher = hasher or hasher_from_settings(settings)
    engine = create_engine_from_settings(settings, database_url, **engine_options)
    return Users(engine, hasher, table_name=settings.users_table)
