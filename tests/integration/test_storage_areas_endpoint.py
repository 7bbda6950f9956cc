"""Integration tests for the storage area endpoints."""

from __future__ import annotations

from fastapi import status

from tests.integration.utils import auth_headers


def test_storage_areas_listed_in_order(client):
    response = client.get("/api/storage-areas")

    assert response.status_code == status.HTTP_200_OK
    payload = response.json()
    assert [area["id"] for area in payload] == ["fridge", "freezer", "pantry"]
    assert [area["order"] for area in payload] == [0, 1, 2]
    assert {"id", "name", "icon", "color", "order"} == set(payload[0].keys())


def test_storage_area_create_update_delete_flow(client):
    response = client.post(
        "/api/storage-areas",
        json={"name": "Wine rack", "icon": "archive", "color": "rose"},
        headers=auth_headers(),
    )
    assert response.status_code == status.HTTP_201_CREATED
    created = response.json()
    assert created["order"] == 3

    response = client.put(
        f"/api/storage-areas/{created['id']}",
        json={"name": "", "color": "violet"},
        headers=auth_headers(),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["name"] == "Wine rack"
    assert response.json()["color"] == "violet"

    response = client.get(f"/api/storage-areas/{created['id']}")
    assert response.status_code == status.HTTP_200_OK

    response = client.delete(f"/api/storage-areas/{created['id']}", headers=auth_headers())
    assert response.status_code == status.HTTP_204_NO_CONTENT

    response = client.get(f"/api/storage-areas/{created['id']}")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_storage_area_create_validates_input(client):
    response = client.post(
        "/api/storage-areas",
        json={"name": "   ", "icon": "box", "color": "slate"},
        headers=auth_headers(),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.post(
        "/api/storage-areas",
        json={"name": "Shed", "icon": "rocket", "color": "slate"},
        headers=auth_headers(),
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_storage_area_reorder_batch(client):
    response = client.put(
        "/api/storage-areas/reorder/batch",
        json={"ids": ["pantry", "fridge"]},
        headers=auth_headers(),
    )

    assert response.status_code == status.HTTP_200_OK
    assert [(area["id"], area["order"]) for area in response.json()] == [
        ("pantry", 0),
        ("fridge", 1),
        ("freezer", 2),
    ]


def test_storage_area_reorder_rejects_unknown_id(client):
    response = client.put(
        "/api/storage-areas/reorder/batch",
        json={"ids": ["pantry", "garage"]},
        headers=auth_headers(),
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert "garage" in response.json()["detail"]


def test_missing_storage_area_update_and_delete_return_404(client):
    response = client.put("/api/storage-areas/nope", json={"name": "X"}, headers=auth_headers())
    assert response.status_code == status.HTTP_404_NOT_FOUND

    response = client.delete("/api/storage-areas/nope", headers=auth_headers())
    assert response.status_code == status.HTTP_404_NOT_FOUND
