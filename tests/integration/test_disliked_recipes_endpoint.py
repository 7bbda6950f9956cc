"""Integration tests for the disliked recipe endpoints."""

from __future__ import annotations

from fastapi import status

from tests.integration.utils import auth_headers


def test_disliked_recipe_flow(client):
    response = client.post(
        "/api/disliked-recipes", json={"name": " Liver Pate "}, headers=auth_headers()
    )
    assert response.status_code == status.HTTP_201_CREATED
    created = response.json()
    assert created["name"] == "Liver Pate"

    response = client.post(
        "/api/disliked-recipes", json={"name": "liver pate"}, headers=auth_headers()
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == created["id"]

    assert [entry["name"] for entry in client.get("/api/disliked-recipes").json()] == [
        "Liver Pate"
    ]
    assert client.get("/api/disliked-recipes/names").json() == {"names": ["liver pate"]}

    response = client.post("/api/disliked-recipes/check", json={"name": "LIVER PATE"})
    assert response.json() == {"is_disliked": True}

    response = client.delete("/api/disliked-recipes/Liver Pate", headers=auth_headers())
    assert response.status_code == status.HTTP_204_NO_CONTENT

    response = client.post("/api/disliked-recipes/check", json={"name": "Liver Pate"})
    assert response.json() == {"is_disliked": False}


def test_removing_unknown_recipe_is_a_no_op(client):
    response = client.delete("/api/disliked-recipes/never-added", headers=auth_headers())

    assert response.status_code == status.HTTP_204_NO_CONTENT


def test_blank_names_rejected(client):
    response = client.post("/api/disliked-recipes", json={"name": "  "}, headers=auth_headers())
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.post("/api/disliked-recipes/check", json={"name": ""})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
