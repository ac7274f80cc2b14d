# Storeroom Inventory Test Suite - Shared Fixtures
#
# This module provides:
# - An in-memory SQLite database per test (shared through StaticPool)
# - A blob store rooted in the test's tmp_path
# - A FastAPI TestClient with get_db / get_blob_store overridden
# - Small helpers to create products and movements through the API

import os

# The application builds its default engine on import; keep it in memory
os.environ.setdefault("DATABASE_URL", "sqlite://")

from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from utils.blob_store import BlobStore, get_blob_store


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def blobs(tmp_path) -> BlobStore:
    return BlobStore(tmp_path / "attachments")


@pytest.fixture()
def client(session_factory, blobs):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blobs
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =============================================================================
# API HELPERS
# =============================================================================

def create_product(client: TestClient, **fields: Any) -> Dict[str, Any]:
    body = {"description": "Gloves", "quantity": 10}
    body.update(fields)
    response = client.post("/products", json=body)
    assert response.status_code == 200, response.text
    return response.json()["product"]


def find_product(client: TestClient, product_id: int) -> Dict[str, Any]:
    products = client.get("/products").json()
    return next(p for p in products if p["id"] == product_id)


def record_entry(client: TestClient, description: str, quantity: int, **fields: Any):
    body = {"description": description, "quantity": quantity, "warehouseKeeper": "Ana"}
    body.update(fields)
    return client.post("/entry", json=body)


def record_exit(client: TestClient, product_id: int, quantity: int, **fields: Any):
    body = {"productRef": product_id, "quantity": quantity, "warehouseKeeper": "Ana"}
    body.update(fields)
    return client.post("/exit", json=body)
