import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.auth_settings import AuthSettings
from src.depends import get_auth_settings, get_session, get_unit_of_work
from tests.fixtures.json_loader import TestDataLoader
from tests.utils.api import API


@pytest.fixture
def test_data():
    return TestDataLoader()


@pytest.fixture
def auth_settings():
    return AuthSettings(
        access_secret="integration-access-secret",
        refresh_secret="integration-refresh-secret",
        bcrypt_rounds=4,
        expose_debug_tokens=True,
    )


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest.fixture
def app(db_session, auth_settings):
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_auth_settings] = lambda: auth_settings
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def registered(client, test_data):
    """Alice, registered through the API; returns the response data"""
    response = await client.post(f"{API}/register", json=test_data.get_copy("register_alice"))
    assert response.status_code == 201
    return response.json()["data"]
