"""
User repository - encapsulates all user data access (SOLID: Single Responsibility).
Challenge: Keep queries in one place; surface raw zero/one-row results.
Design: Borrows the caller's session, never commits or closes it.
"""

import logging
from typing import Any

from sqlalchemy import Table, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.base import Executable
from sqlalchemy.ext.asyncio import AsyncSession

from accounts.errors import StorageError

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class UserRepository:
    """Parameterized insert/update/select against the users table. Rows come back as dicts."""

    def __init__(self, session: AsyncSession, table: Table):
        self.session = session
        self.table = table

    def _credential_values(self, username: str, hash: str, salt: str | None) -> dict[str, Any]:
        values: dict[str, Any] = {"username": username, "hash": hash}
        # Self-salting schemes have no salt column; nothing to write there.
        if "salt" in self.table.c:
            values["salt"] = salt
        return values

    async def _rows(self, statement: Executable) -> list[Row]:
        try:
            result = await self.session.execute(statement)
            return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as exc:
            detail = str(getattr(exc, "orig", None) or type(exc).__name__)
            logger.warning("users query failed: table=%s error=%s", self.table.name, detail)
            raise StorageError(detail) from exc

    async def insert(self, username: str, hash: str, salt: str | None = None) -> list[Row]:
        """Insert one user; id is generated by the store in the same statement."""
        statement = (
            insert(self.table)
            .values(**self._credential_values(username, hash, salt))
            .returning(*self.table.c)
        )
        return await self._rows(statement)

    async def update(self, id: int, username: str, hash: str, salt: str | None = None) -> list[Row]:
        """Replace username/hash/salt of an existing row. Zero rows when the id does not exist."""
        statement = (
            update(self.table)
            .where(self.table.c.id == id)
            .values(**self._credential_values(username, hash, salt))
            .returning(*self.table.c)
        )
        return await self._rows(statement)

    async def select_by_id(self, id: int) -> list[Row]:
        return await self._rows(select(self.table).where(self.table.c.id == id))

    async def select_by_username(self, username: str) -> list[Row]:
        """Find user by username - used for lookup and authentication."""
        return await self._rows(select(self.table).where(self.table.c.username == username))
