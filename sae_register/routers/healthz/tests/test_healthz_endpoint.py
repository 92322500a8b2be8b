import pytest

from sae_register.routers.healthz.router import get_database_check


def check_returning(value: bool):
    async def check() -> bool:
        return value

    return lambda: check


@pytest.mark.asyncio
async def test_health_check(client_factory):
    """Test the health check endpoint returns healthy status."""
    async with client_factory({get_database_check: check_returning(True)}) as client:
        response = await client.get("/healthz/")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "ok"
    assert data["version"] == "0.1.0"


@pytest.mark.asyncio
async def test_health_check_without_database(client_factory):
    """Test the API still answers when the database is unreachable."""
    async with client_factory({get_database_check: check_returning(False)}) as client:
        response = await client.get("/healthz/")

    assert response.status_code == 200
    assert response.json() == {"status": "degraded", "database": "unreachable", "version": "0.1.0"}


@pytest.mark.asyncio
async def test_health_check_against_test_database(client_factory, db):
    async with client_factory() as client:
        response = await client.get("/healthz/")

    assert response.json()["database"] == "ok"


@pytest.mark.asyncio
async def test_root_endpoint(client_factory):
    """Test the root endpoint returns welcome message."""
    async with client_factory() as client:
        response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["message"] == "Welcome to the SAE Event Registration API"
