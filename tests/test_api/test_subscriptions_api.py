"""
Tests for Subscriptions API endpoints
"""
import uuid
import pytest
import psycopg
from unittest.mock import Mock, patch
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.main import app
from app.api.deps import get_db

USER_ID = "60601fee-2bf1-4721-ae6f-7636e79a0cba"
OTHER_USER_ID = "0b9c5d2e-58a1-4f57-9d61-2a3f0c4e7b11"


@pytest.fixture
def client(db_session):
    """Test client для FastAPI с SQLite-сессией вместо PostgreSQL"""
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def broken_db_client():
    """Client, у которого любая работа с БД падает с OperationalError"""
    session = Mock()
    session.query.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))

    def _override_get_db():
        yield session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app), session
    finally:
        app.dependency_overrides.clear()


def _create(client, **overrides):
    body = {
        "service_name": "Yandex Plus",
        "price": 400,
        "user_id": USER_ID,
        "start_date": "07-2025",
    }
    body.update(overrides)
    response = client.post("/api/v1/subscriptions", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.text == "ok"


def test_ready(client):
    with patch("app.main.check_db_connection") as mock_check:
        response = client.get("/ready")
    assert response.status_code == 200
    assert response.text == "ok"
    mock_check.assert_called_once_with()


def test_ready_database_down_returns_500(client):
    with patch("app.main.check_db_connection", side_effect=psycopg.OperationalError("down")):
        response = client.get("/ready")
    assert response.status_code == 500

class TestCreate:
    def test_create_subscription(self, client):
        data = _create(client)
        assert uuid.UUID(data["id"])
        assert data["service_name"] == "Yandex Plus"
        assert data["price"] == 400
        assert data["user_id"] == USER_ID
        assert data["start_date"] == "07-2025"
        assert data["end_date"] is None
        assert "created_at" in data
        assert "updated_at" in data

    def test_create_with_end_date(self, client):
        data = _create(client, start_date="1-2025", end_date="6-2025")
        assert data["start_date"] == "01-2025"
        assert data["end_date"] == "06-2025"

    def test_invalid_date_format_returns_400(self, client):
        response = client.post("/api/v1/subscriptions", json={
            "service_name": "Netflix",
            "price": 100,
            "user_id": USER_ID,
            "start_date": "2025-07",
        })
        assert response.status_code == 400
        assert "start_date" in response.json()["detail"]

    def test_negative_price_rejected(self, client):
        response = client.post("/api/v1/subscriptions", json={
            "service_name": "Netflix",
            "price": -1,
            "user_id": USER_ID,
            "start_date": "07-2025",
        })
        assert response.status_code == 422

    def test_missing_required_field_rejected(self, client):
        response = client.post("/api/v1/subscriptions", json={
            "service_name": "Netflix",
            "price": 100,
            "start_date": "07-2025",
        })
        assert response.status_code == 422


class TestReadUpdateDelete:
    def test_get_subscription(self, client):
        created = _create(client)
        response = client.get(f"/api/v1/subscriptions/{created['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    def test_get_missing_returns_404(self, client):
        response = client.get(f"/api/v1/subscriptions/{uuid.uuid4()}")
        assert response.status_code == 404

    def test_get_invalid_id_returns_422(self, client):
        response = client.get("/api/v1/subscriptions/not-a-uuid")
        assert response.status_code == 422

    def test_list_with_filters(self, client):
        _create(client, service_name="Netflix")
        _create(client, service_name="Spotify")
        _create(client, service_name="Netflix", user_id=OTHER_USER_ID)

        all_subs = client.get("/api/v1/subscriptions").json()
        assert len(all_subs) == 3

        by_user = client.get("/api/v1/subscriptions", params={"user_id": OTHER_USER_ID}).json()
        assert [s["service_name"] for s in by_user] == ["Netflix"]

        by_service = client.get("/api/v1/subscriptions", params={"service_name": "Netflix"}).json()
        assert len(by_service) == 2

        empty_filter = client.get("/api/v1/subscriptions", params={"service_name": ""}).json()
        assert len(empty_filter) == 3

    def test_list_empty(self, client):
        response = client.get("/api/v1/subscriptions")
        assert response.status_code == 200
        assert response.json() == []

    def test_update_subscription(self, client):
        created = _create(client, end_date="12-2025")
        response = client.put(
            f"/api/v1/subscriptions/{created['id']}",
            json={"price": 500, "end_date": None},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["price"] == 500
        assert data["end_date"] is None
        assert data["service_name"] == "Yandex Plus"

    def test_update_without_end_date_keeps_it(self, client):
        created = _create(client, end_date="12-2025")
        response = client.put(
            f"/api/v1/subscriptions/{created['id']}",
            json={"service_name": "Kinopoisk"},
        )
        assert response.status_code == 200
        assert response.json()["end_date"] == "12-2025"

    def test_update_invalid_date_returns_400(self, client):
        created = _create(client)
        response = client.put(
            f"/api/v1/subscriptions/{created['id']}",
            json={"end_date": "13-2025"},
        )
        assert response.status_code == 400

    def test_update_missing_returns_404(self, client):
        response = client.put(f"/api/v1/subscriptions/{uuid.uuid4()}", json={"price": 1})
        assert response.status_code == 404

    def test_delete_subscription(self, client):
        created = _create(client)
        response = client.delete(f"/api/v1/subscriptions/{created['id']}")
        assert response.status_code == 204
        assert client.get(f"/api/v1/subscriptions/{created['id']}").status_code == 404

    def test_delete_missing_returns_404(self, client):
        response = client.delete(f"/api/v1/subscriptions/{uuid.uuid4()}")
        assert response.status_code == 404


class TestTotalCost:
    def test_total_cost(self, client):
        _create(client, price=100, start_date="06-2024", end_date="03-2025")
        _create(client, price=400, start_date="07-2025")
        _create(client, price=999, start_date="05-2024")

        response = client.post("/api/v1/subscriptions/total-cost", json={
            "start_period": "01-2025",
            "end_period": "12-2025",
        })
        assert response.status_code == 200
        assert response.json() == {"total_cost": 300 + 400}

    def test_total_cost_with_filters(self, client):
        _create(client, service_name="Netflix", price=100, start_date="01-2025", end_date="03-2025")
        _create(client, service_name="Netflix", price=100, start_date="01-2025",
                end_date="03-2025", user_id=OTHER_USER_ID)
        _create(client, service_name="Spotify", price=10, start_date="01-2025", end_date="03-2025")

        response = client.post("/api/v1/subscriptions/total-cost", json={
            "start_period": "01-2025",
            "end_period": "12-2025",
            "user_id": USER_ID,
            "service_name": "Netflix",
        })
        assert response.status_code == 200
        assert response.json()["total_cost"] == 300

    def test_inverted_period_returns_400(self, client):
        response = client.post("/api/v1/subscriptions/total-cost", json={
            "start_period": "05-2025",
            "end_period": "01-2025",
        })
        assert response.status_code == 400
        assert "before or equal" in response.json()["detail"]

    def test_invalid_period_format_returns_400(self, client):
        response = client.post("/api/v1/subscriptions/total-cost", json={
            "start_period": "2025-01",
            "end_period": "12-2025",
        })
        assert response.status_code == 400
        assert "start_period" in response.json()["detail"]

    def test_missing_period_returns_422(self, client):
        response = client.post("/api/v1/subscriptions/total-cost", json={
            "start_period": "01-2025",
        })
        assert response.status_code == 422


class TestStorageErrors:
    def test_total_cost_storage_error_returns_500(self, broken_db_client):
        client, _ = broken_db_client
        response = client.post("/api/v1/subscriptions/total-cost", json={
            "start_period": "01-2025",
            "end_period": "12-2025",
        })
        assert response.status_code == 500

    def test_inverted_period_rejected_without_storage_access(self, broken_db_client):
        client, session = broken_db_client
        response = client.post("/api/v1/subscriptions/total-cost", json={
            "start_period": "05-2025",
            "end_period": "01-2025",
        })
        assert response.status_code == 400
        session.query.assert_not_called()

    def test_list_storage_error_returns_500(self, broken_db_client):
        client, _ = broken_db_client
        response = client.get("/api/v1/subscriptions")
        assert response.status_code == 500
