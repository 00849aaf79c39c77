"""
pytest configuration and fixtures for the users backend tests
"""

import pytest
import pytest_asyncio
import httpx
from typing import Any, Dict, List, Optional

from app import create_app
from config.settings import Settings
from database.user_repository import InMemoryUserRepository, StoreError
from models.user import User
from services.users_service import UsersService, get_users_service


class FailingUserRepository:
    """Repository whose every store call fails, as a dropped connection would"""

    def __init__(self, error: Exception = None):
        self.error = error or StoreError("Database query failed: connection refused")

    def create(self, data: Dict[str, Any]) -> User:
        return User(**data)

    async def save(self, user: User) -> User:
        raise self.error

    async def find_all(self) -> List[User]:
        raise self.error

    async def find_by_id(self, user_id: int) -> Optional[User]:
        raise self.error

    async def update_by_id(self, user_id: int, changes: Dict[str, Any]) -> int:
        raise self.error

    async def delete_by_id(self, user_id: int) -> int:
        raise self.error


@pytest.fixture
def memory_settings() -> Settings:
    return Settings(env="TEST", storage_backend="memory")


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def users_service(repository) -> UsersService:
    return UsersService(repository)


@pytest_asyncio.fixture
async def seeded_service(users_service) -> UsersService:
    """Service whose store already holds John Doe (id 1) and Jane Smith (id 2)"""
    await users_service.create({"firstname": "John", "lastname": "Doe"})
    await users_service.create({"firstname": "Jane", "lastname": "Smith"})
    return users_service


@pytest.fixture
def test_app(memory_settings):
    return create_app(memory_settings)


def make_client(app, service) -> httpx.AsyncClient:
    app.dependency_overrides[get_users_service] = lambda: service
    # Unhandled errors still get the 500 response from the error handler
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    return httpx.AsyncClient(transport=transport, base_url="http://testserver")


@pytest_asyncio.fixture
async def client(test_app, seeded_service):
    async with make_client(test_app, seeded_service) as http_client:
        yield http_client


@pytest_asyncio.fixture
async def failing_client(test_app):
    async with make_client(test_app, UsersService(FailingUserRepository())) as http_client:
        yield http_client
