"""Integration tests for the pantry item endpoints."""

from __future__ import annotations

from datetime import date, timedelta

from fastapi import status

from larder.db import items as items_module
from tests.integration.utils import auth_headers


def _add(client, **overrides):
    payload = {"name": "Eggs", "quantity": 6, "storage_area_id": "fridge"}
    payload.update(overrides)
    return client.post("/api/items", json=payload, headers=auth_headers())


def test_add_returns_201_then_200_on_merge(client):
    first = _add(client)
    assert first.status_code == status.HTTP_201_CREATED

    second = _add(client, name="eggs")
    assert second.status_code == status.HTTP_200_OK
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["quantity"] == 12
    assert second.json()["name"] == "Eggs"

    items = client.get("/api/items").json()
    assert len(items) == 1


def test_non_ascii_name_merges_over_http(client):
    first = _add(client, name="Äpfel", storage_area_id="pantry")
    second = _add(client, name="äpfel", storage_area_id="pantry")

    assert first.status_code == status.HTTP_201_CREATED
    assert second.status_code == status.HTTP_200_OK
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["quantity"] == 12


def test_key_collision_returns_409(client, monkeypatch):
    _add(client)
    monkeypatch.setattr(items_module, "_find_mergeable", lambda *args: None)

    response = _add(client)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert "already exists" in response.json()["detail"]
    assert len(client.get("/api/items").json()) == 1


def test_add_validation_errors(client):
    assert _add(client, name="  ").status_code == status.HTTP_400_BAD_REQUEST
    assert _add(client, quantity=0).status_code == status.HTTP_400_BAD_REQUEST
    assert _add(client, storage_area_id="").status_code == status.HTTP_400_BAD_REQUEST
    assert _add(client, storage_area_id="attic").status_code == status.HTTP_404_NOT_FOUND
    assert _add(client, quantity="lots").status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert client.get("/api/items").json() == []


def test_get_and_filter_items(client):
    eggs = _add(client).json()
    _add(client, name="Peas", quantity=1, storage_area_id="freezer")

    response = client.get(f"/api/items/{eggs['id']}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["is_opened"] is False

    by_area = client.get("/api/items/area/freezer").json()
    assert [item["name"] for item in by_area] == ["Peas"]

    by_query = client.get("/api/items", params={"storage_area_id": "fridge"}).json()
    assert [item["name"] for item in by_query] == ["Eggs"]

    assert client.get("/api/items/missing").status_code == status.HTTP_404_NOT_FOUND


def test_quantity_update_and_zero_deletes(client):
    item = _add(client).json()

    response = client.put(
        f"/api/items/{item['id']}/quantity", json={"quantity": 2}, headers=auth_headers()
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["quantity"] == 2

    response = client.put(
        f"/api/items/{item['id']}/quantity", json={"quantity": 0}, headers=auth_headers()
    )
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/api/items/{item['id']}").status_code == status.HTTP_404_NOT_FOUND


def test_partial_open_returns_both_records(client):
    expiry = date.today() + timedelta(days=10)
    item = _add(client, quantity=5, expiry_date=expiry.isoformat()).json()

    response = client.put(
        f"/api/items/{item['id']}/open", json={"quantity_to_open": 2}, headers=auth_headers()
    )

    assert response.status_code == status.HTTP_200_OK
    remaining, opened = response.json()["items"]
    assert (remaining["id"], remaining["quantity"], remaining["is_opened"]) == (item["id"], 3, False)
    assert opened["quantity"] == 2
    assert opened["is_opened"] is True
    assert opened["opened_at"] is not None
    assert opened["created_at"] == item["created_at"]
    assert opened["expiry_date"] == (date.today() + timedelta(days=5)).isoformat()


def test_full_open_and_invalid_open(client):
    item = _add(client, quantity=2).json()

    response = client.put(
        f"/api/items/{item['id']}/open", json={"quantity_to_open": 2}, headers=auth_headers()
    )
    assert response.status_code == status.HTTP_200_OK
    assert [record["id"] for record in response.json()["items"]] == [item["id"]]

    response = client.put(
        f"/api/items/{item['id']}/open", json={"quantity_to_open": 0}, headers=auth_headers()
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.put(
        "/api/items/missing/open", json={"quantity_to_open": 1}, headers=auth_headers()
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_delete_item(client):
    item = _add(client).json()

    response = client.delete(f"/api/items/{item['id']}", headers=auth_headers())
    assert response.status_code == status.HTTP_204_NO_CONTENT

    response = client.delete(f"/api/items/{item['id']}", headers=auth_headers())
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_deleting_area_removes_its_items(client):
    _add(client)
    _add(client, name="eggs")

    response = client.delete("/api/storage-areas/fridge", headers=auth_headers())
    assert response.status_code == status.HTTP_204_NO_CONTENT

    assert client.get("/api/items").json() == []
    areas = client.get("/api/storage-areas").json()
    assert [(area["id"], area["order"]) for area in areas] == [("freezer", 0), ("pantry", 1)]
