"""
Pytest fixtures - throwaway SQLite database per test, cheap hashing parameters.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio

from accounts.config import Settings
from accounts.services.user_service import Users, build_users


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'users.db'}",
        pbkdf2_rounds=1000,
        bcrypt_rounds=4,
    )


@pytest.fixture
def crypt_settings(settings: Settings) -> Settings:
    return settings.model_copy(update={"hash_scheme": "crypt"})


@pytest_asyncio.fixture
async def users(settings: Settings) -> AsyncGenerator[Users, None]:
    """Salted pbkdf2 store (salt column present), schema created."""
    store = build_users(settings=settings)
    await store.drop_schema()
    await store.create_schema()
    yield store
    await store.end()


@pytest_asyncio.fixture
async def crypt_users(crypt_settings: Settings) -> AsyncGenerator[Users, None]:
    """Self-salting bcrypt store (no salt column), schema created."""
    store = build_users(settings=crypt_settings)
    await store.create_schema()
    yield store
    await store.end()
