import os
import tempfile

# Configure before the application (and its settings) are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_REQUIRED"] = "false"
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="inventory-uploads-"))

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from inventory.main import app
from inventory.database import Base, get_db
from inventory.client.api import InventoryClient
from inventory.utils.storage import FileStorage, get_storage


# Create test database (SQLite in-memory for testing)
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the dependency
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function")
def storage(tmp_path):
    """Upload storage in a per-test temporary directory."""
    file_storage = FileStorage(tmp_path / "uploads")
    file_storage.ensure_dirs()
    app.dependency_overrides[get_storage] = lambda: file_storage

    yield file_storage

    app.dependency_overrides.pop(get_storage, None)


@pytest.fixture(scope="function")
def database():
    """Fresh tables for each test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(database, storage):
    """Create test client with fresh database for each test."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(database):
    """Create database session for direct database access in tests."""
    session = TestingSessionLocal()

    yield session

    session.close()


@pytest.fixture
async def api_client(database, storage):
    """InventoryClient talking to the app in-process."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield InventoryClient("http://test/api", client=http)


@pytest.fixture
def create_product(client):
    """Create a product through the API and return its ID."""
    def _create(**fields):
        body = {"name": "Test Product", "price": 50.00, "stock": 10}
        body.update(fields)
        response = client.post("/api/products", json=body)
        assert response.status_code == 201, response.text
        return response.json()["productId"]
    return _create
