"""
Schema manager: create/drop DDL for the users table.
Both calls are idempotent (checkfirst) and keep no state between calls.
"""

import logging

from sqlalchemy import Table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from accounts.errors import StorageError

logger = logging.getLogger(__name__)


async def create_schema(engine: AsyncEngine, table: Table) -> None:
    """CREATE TABLE IF NOT EXISTS, in its own transaction."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(table.create, checkfirst=True)
    except SQLAlchemyError as exc:
        logger.warning("create_schema failed: table=%s error=%s", table.name, exc)
        raise StorageError(f"Could not create table {table.name!r}") from exc
    logger.debug("create_schema: table=%s columns=%s", table.name, list(table.c.keys()))


async def drop_schema(engine: AsyncEngine, table: Table) -> None:
    """DROP TABLE IF EXISTS. Safe when the table is absent."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(table.drop, checkfirst=True)
    except SQLAlchemyError as exc:
        logger.warning("drop_schema failed: table=%s error=%s", table.name, exc)
        raise StorageError(f"Could not drop table {table.name!r}") from exc
    logger.debug("drop_schema: table=%s", table.name)
