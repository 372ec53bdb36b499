import os
import uuid

os.environ.setdefault("DB_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from database import Base, obtain_db_session
from config import settings

engine = create_engine(
    settings.SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base.metadata.create_all(bind=engine)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[obtain_db_session] = override_get_db
test_client = TestClient(app)


@pytest.fixture
def client():
    return test_client


def register(username=None, password="password123"):
    username = username or f"barber-{uuid.uuid4().hex[:8]}"
    response = test_client.post("/register", json={"username": username, "password": password})
    return response.json()["access_token"]


@pytest.fixture
def token():
    # a fresh owner per test keeps product lists isolated
    return register()


@pytest.fixture
def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def catalog(auth_header):
    suffix = uuid.uuid4().hex[:6]
    category = test_client.post("/categories/", json={"name": f"Ceras-{suffix}"}, headers=auth_header).json()
    supplier = test_client.post(
        "/suppliers/",
        json={"name": f"Proveedor-{suffix}", "contact_email": "ventas@example.com"},
        headers=auth_header,
    ).json()
    return {"category": category, "supplier": supplier}


def unique_sku(prefix="SKU"):
    return f"{prefix}-{uuid.uuid4().hex[:8]}"
