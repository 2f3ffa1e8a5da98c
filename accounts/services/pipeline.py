"""
Pipeline - ordered chain of fallible async steps sharing one session.
Challenge: Short-circuit on the first failure, never leak a connection.
Design: Every step has the same fixed signature, step(session, value) -> next value.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from accounts.db.session import session_scope
from accounts.errors import StorageError

logger = logging.getLogger(__name__)

Step = Callable[[AsyncSession, Any], Awaitable[Any]]


class Pipeline:
    """Runs steps in order inside one session scope.

    The output of each step is the input of the next. An exception raised by a
    step aborts the remaining steps and reaches the caller unchanged; the
    session is rolled back and closed on the way out.
    """

    def __init__(self, name: str, session_maker: async_sessionmaker[AsyncSession], *steps: Step):
        if not steps:
            raise ValueError("a pipeline needs at least one step")
        self.name = name
        self.session_maker = session_maker
        self.steps = steps

    async def __call__(self, value: Any) -> Any:
        try:
            async with session_scope(self.session_maker) as session:
                for step in self.steps:
                    logger.debug("%s: running step %s", self.name, step.__name__)
                    value = await step(session, value)
        except SQLAlchemyError as exc:
            # Raised outside a step: commit, rollback or connection checkout.
            logger.warning("%s: session failed: %s", self.name, type(exc).__name__)
            raise StorageError(str(getattr(exc, "orig", None) or type(exc).__name__)) from exc
        return value
