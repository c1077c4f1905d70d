import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from artmarket.api.dependencies import get_current_user, get_optional_identity
from artmarket.database import get_db
from artmarket.main import app
from artmarket.services.auth_service import Identity

BUYER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
ARTIST_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def mock_db():
    """An AsyncMock standing in for the request's AsyncSession.

    Installed as the ``get_db`` override for the duration of the test.
    """
    db = AsyncMock()
    db.add = MagicMock()

    async def _override():
        yield db

    app.dependency_overrides[get_db] = _override
    yield db
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def buyer():
    """Authenticate every request as a buyer profile."""
    profile = MagicMock()
    profile.id = BUYER_ID
    profile.email = "buyer@example.com"
    profile.username = "buyer"
    profile.avatar_url = None
    profile.bio = None
    profile.role = "buyer"

    app.dependency_overrides[get_current_user] = lambda: profile
    yield profile
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
def buyer_identity():
    """Sign every request in as the buyer on routes that take an optional identity."""
    identity = Identity(user_id=BUYER_ID, email="buyer@example.com", role="buyer")

    app.dependency_overrides[get_optional_identity] = lambda: identity
    yield identity
    app.dependency_overrides.pop(get_optional_identity, None)
