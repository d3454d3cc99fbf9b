import asyncio
import pytest
from fastapi.testclient import TestClient

import config
from main import app


@pytest.fixture
def database(tmp_path):
    """Fresh SQLite file database per test, tables created"""
    config.configure_database(f"sqlite:///{tmp_path / 'rawmate.db'}")
    asyncio.run(config.init_db())
    yield
    asyncio.run(config.dispose_db())


@pytest.fixture
def client(database):
    with TestClient(app) as test_client:
        yield test_client


def identify(client, user_id, role, name=None, location="Pune"):
    response = client.post("/api/user/identify", json={
        "_id": user_id,
        "name": name or f"{role.title()} {user_id}",
        "email": f"{user_id}@example.com",
        "role": role,
        "location": location,
    })
    assert response.status_code in (200, 201), response.text
    return response.json()["user"]


def create_group(client, creator_id, **overrides):
    body = {
        "product": "Onion",
        "price": 25,
        "totalQuantity": 100,
        "minJoinQuantity": 5,
        "pickupPoint": "Gandhi Market",
        "userId": creator_id,
        "userRole": "vendor",
    }
    body.update(overrides)
    response = client.post("/api/groups", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def join(client, group_id, user_id, quantity, role="vendor"):
    return client.post(
        f"/api/join-requests/{group_id}/join",
        json={"quantity": quantity, "userId": user_id, "userRole": role},
    )


@pytest.fixture
def vendor(client):
    return identify(client, "vendor-1", "vendor", name="Ravi")


@pytest.fixture
def supplier(client):
    return identify(client, "supplier-1", "supplier", name="Sharma Traders", location="Nashik")
