import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from storefront.config.database import get_database
from storefront.main import app
from storefront.services import products as product_service
from storefront.services import users as user_service


def product_payload(**overrides):
    payload = {
        "name": "Arnica Montana",
        "description": "Used for bruises, sprains and muscle soreness",
        "brand": "SBL",
        "potencies": ["30C", "200C"],
        "forms": ["Dilution", "Globules"],
        "base_price": 120.0,
        "stock": 25,
        "min_stock": 5,
        "symptoms_tags": ["bruises", "muscle pain"],
    }
    payload.update(overrides)
    return payload


def shipping_payload(**overrides):
    payload = {
        "full_name": "Asha Rao",
        "address_line1": "12 MG Road",
        "city": "Pune",
        "state": "Maharashtra",
        "zip_code": "411001",
        "phone": "9876543210",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def db():
    return AsyncMongoMockClient()["homeo_store_test"]


@pytest.fixture
def client(db):
    async def _database():
        return db

    app.dependency_overrides[get_database] = _database
    # No context manager: the lifespan would try to reach a real MongoDB
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
async def product(db):
    return await product_service.create_product(db, product_payload(), "admin")


@pytest.fixture
async def user(db):
    return await user_service.create_user(db, {"name": "Asha", "email": "asha@example.com", "address": "Pune, Maharashtra"})
