import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("METRICS_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from httpx import ASGITransport, AsyncClient

from main import create_app
from services.auth_service.schemas import RegisterRequest
from services.product_service.repository import ProductRepository
from shared.config.database import init_models
from shared.config.settings import Settings
from shared.security import COOKIE_NAME, Role, create_access_token


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        JWT_SECRET_KEY="test-secret-key",
        METRICS_ENABLED=False,
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
async def app(settings):
    app = create_app(settings)
    await init_models(app.state.engine)
    yield app
    await app.state.engine.dispose()


@pytest.fixture
async def db(app):
    async with app.state.session_factory() as session:
        yield session


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def login_as(client, settings):
    """Put a signed token for the given role into the client's cookie jar."""

    def _login_as(role: Role, user_id: int = 1, username: str = "tester"):
        token = create_access_token(
            {"sub": str(user_id), "name": username, "role": role.value}, settings
        )
        client.cookies.set(COOKIE_NAME, token)
        return token

    return _login_as


@pytest.fixture
def seed_products(app):
    """Insert products in their own session and return the new ids."""

    async def _seed(*names: str, quantity: int = 1, description: str = "seeded"):
        ids = []
        async with app.state.session_factory() as session:
            for name in names:
                ids.append(await ProductRepository.create_product(session, name, quantity, description))
        return ids

    return _seed


@pytest.fixture
def seed_user(app):
    async def _seed(username: str, password: str, role: Role = Role.EMPLOYEE):
        async with app.state.session_factory() as session:
            return await app.state.auth_service.register(
                session, RegisterRequest(username=username, password=password, role=role)
            )

    return _seed
