# tests/api/test_system.py
"""Tests for system endpoints and error rendering."""

from fastapi import status


def test_root_banner(client) -> None:
    response = client.get("/")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["name"] == "Rewise API"
    assert "running" in data["message"]


def test_health_reports_database(client) -> None:
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok", "database": "ok"}


def test_public_config_hides_secrets(client) -> None:
    response = client.get("/api/config")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["premium"]["amount"] == 1500
    assert data["premium"]["checkoutEnabled"] is True
    assert "sk_test_key" not in response.text
    assert "whsec" not in response.text


def test_unknown_route_is_404(client) -> None:
    response = client.get("/api/nowhere")
    assert response.status_code == status.HTTP_404_NOT_FOUND
