import os

# must be set before the settings module is first imported
os.environ.setdefault("DB_DSN", "sqlite+aiosqlite:///./sae_register.db")

import contextlib  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from sae_register.config.database import async_session_manager, init_db  # noqa: E402
from sae_register.invitations.repository.orm_models import BaseModel  # noqa: E402
from sae_register.main import app  # noqa: E402


@pytest_asyncio.fixture
async def db():
    """Create the schema on the test database and empty every table afterwards."""
    await init_db()
    yield
    async with async_session_manager() as session:
        for table in reversed(BaseModel.metadata.sorted_tables):
            await session.execute(table.delete())


@pytest.fixture
def client_factory():
    """Build a test client with the given dependency overrides."""

    @contextlib.asynccontextmanager
    async def _client_factory(overrides: dict | None = None):
        for dependency, override in (overrides or {}).items():
            app.dependency_overrides[dependency] = override
        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client
        finally:
            app.dependency_overrides.clear()

    return _client_factory
