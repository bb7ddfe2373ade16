"""Pytest configuration and shared fixtures."""
import sys
from pathlib import Path

# Add the backend directory to Python path
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import pytest
from httpx import ASGITransport, AsyncClient

from skillswap.domain.swap.services import SwapService
from skillswap.domain.users.services import UserService
from skillswap.infra.db.base import Base, build_engine, build_session_factory
from skillswap.infra.db.repositories.swap_repo import SwapRepositoryImpl
from skillswap.infra.db.repositories.user_repo import UserRepositoryImpl
import skillswap.infra.db.models  # noqa: F401  (registers tables on Base)


def pytest_configure(config):
    """Register markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that need a real DB (deselect with '-m \"not integration\"')"
    )


# Test database setup: a file-backed SQLite DB so separate sessions can race each other
@pytest.fixture
async def engine(tmp_path):
    """Create a test engine with all tables."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'skillswap.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def user_service(db_session):
    return UserService(UserRepositoryImpl(db_session))


@pytest.fixture
def swap_service(db_session):
    """Create a swap service instance."""
    return SwapService(SwapRepositoryImpl(db_session), UserRepositoryImpl(db_session))


@pytest.fixture
async def sample_users(user_service: UserService):
    """Owner of the swap request, a responder and an unrelated user."""
    owner = await user_service.create_user("ana@test.com", "Ana", ["Guitar"])
    responder = await user_service.create_user("ben@test.com", "Ben", ["Web design"])
    outsider = await user_service.create_user("chloe@test.com", "Chloe")
    return {"owner": owner.id, "responder": responder.id, "outsider": outsider.id}


@pytest.fixture
async def swap_request(swap_service: SwapService, sample_users: dict):
    """An Open swap request owned by sample_users['owner']."""
    return await swap_service.create_swap_request(
        created_by=sample_users["owner"],
        service_title="Guitar lessons",
        service_required="Portfolio website",
        categories=["Music"],
    )


@pytest.fixture
async def client(session_factory):
    """HTTP client against the app with get_db bound to the test database."""
    from skillswap.main import app
    from skillswap.infra.db.session import get_db

    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
