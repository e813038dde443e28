"""HTTP level tests for the v1 pet routes."""

import json

import pytest
from fastapi.testclient import TestClient

from pet_registry_api.app.core.exceptions import StorageCorruptionError
from pet_registry_api.app.main import create_app

PETS = "/api/v1/pets"

REX = {"name": "Rex", "breed": "Labrador", "color": "Brown", "photo_reference": "uri1"}


@pytest.fixture
def alice(auth):
    return auth("alice")


@pytest.fixture
def bob(auth):
    return auth("bob")


def register(client, headers, body=REX):
    response = client.post(f"{PETS}/", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestAuthentication:
    def test_mutation_without_token_is_unauthorized(self, client):
        response = client.post(f"{PETS}/", json=REX)

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "unauthorized"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token_is_unauthorized(self, client):
        response = client.post(f"{PETS}/", json=REX, headers={"Authorization": "Bearer not.a.token"})

        assert response.status_code == 401

    def test_reads_are_public(self, client, alice):
        pet = register(client, alice)

        assert client.get(f"{PETS}/").status_code == 200
        assert client.get(f"{PETS}/{pet['id']}").status_code == 200

    def test_anonymous_callers_when_enabled(self, app_settings, clock):
        app_settings.allow_anonymous = True
        with TestClient(create_app(app_settings, clock=clock)) as client:
            response = client.post(f"{PETS}/", json=REX)

        assert response.status_code == 201
        assert response.json()["owner"] == "anonymous"


class TestPetRoutes:
    def test_register_and_get(self, client, alice):
        pet = register(client, alice)

        assert pet["id"] == 1
        assert pet["owner"] == "alice"
        assert pet["is_lost"] is False
        assert pet["lost_location"] is None
        assert pet["updated_at"] is None
        assert client.get(f"{PETS}/1").json() == pet

    def test_get_missing_pet_is_404(self, client):
        response = client.get(f"{PETS}/42")

        assert response.status_code == 404
        assert response.json()["error"] == {"code": "not_found", "message": "Pet with id 42 not found"}

    def test_list_pets(self, client, alice):
        register(client, alice)
        register(client, alice, {**REX, "name": "Max"})

        names = [pet["name"] for pet in client.get(f"{PETS}/").json()]

        assert names == ["Rex", "Max"]

    def test_empty_field_is_invalid_input(self, client, alice):
        response = client.post(f"{PETS}/", json={**REX, "name": ""}, headers=alice)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_input"

    def test_record_too_large_to_store_is_invalid_input(self, client, alice):
        dog = "\U0001F436" * 256
        body = {"name": dog, "breed": dog, "color": dog, "photo_reference": dog}

        response = client.post(f"{PETS}/", json=body, headers=alice)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_input"
        assert client.get(f"{PETS}/").json() == []

    def test_lone_surrogate_is_invalid_input(self, client, alice):
        # json.dumps keeps the surrogate as an ASCII escape.
        body = json.dumps({**REX, "name": "\ud800"})

        response = client.post(
            f"{PETS}/",
            content=body.encode("ascii"),
            headers={**alice, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_input"

    def test_missing_field_fails_request_validation(self, client, alice):
        body = {key: value for key, value in REX.items() if key != "breed"}

        response = client.post(f"{PETS}/", json=body, headers=alice)

        assert response.status_code == 422

    def test_negative_id_fails_request_validation(self, client):
        assert client.get(f"{PETS}/-1").status_code == 422

    def test_update_by_owner(self, client, alice):
        pet = register(client, alice)

        response = client.put(f"{PETS}/{pet['id']}", json={**REX, "color": "Black"}, headers=alice)

        assert response.status_code == 200
        assert response.json()["color"] == "Black"
        assert response.json()["updated_at"] is not None

    def test_update_by_stranger_is_forbidden(self, client, alice, bob):
        pet = register(client, alice)

        response = client.put(f"{PETS}/{pet['id']}", json={**REX, "color": "Black"}, headers=bob)

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "not_authorized"
        assert client.get(f"{PETS}/{pet['id']}").json() == pet

    def test_report_found_on_available_pet(self, client, alice, bob):
        pet = register(client, alice)

        response = client.post(
            f"{PETS}/{pet['id']}/found",
            json={"finder_name": "Bob", "found_location": "5th Ave"},
            headers=bob,
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Pet is not reported as lost"

    def test_delete_missing_pet_is_404(self, client, alice):
        assert client.delete(f"{PETS}/7", headers=alice).status_code == 404

    def test_found_report_missing_is_404(self, client):
        assert client.get(f"{PETS}/1/found-report").status_code == 404


class TestLostAndFoundScenario:
    def test_full_workflow(self, client, alice, bob):
        pet = register(client, alice)
        assert pet["id"] == 1

        lost = client.post(f"{PETS}/1/lost", json={"lost_location": "Central Park"}, headers=alice)
        assert lost.status_code == 200
        assert lost.json()["is_lost"] is True
        assert lost.json()["lost_location"] == "Central Park"

        found = client.post(
            f"{PETS}/1/found",
            json={"finder_name": "Bob", "found_location": "5th Ave"},
            headers=bob,
        )
        assert found.status_code == 200
        assert found.json()["is_lost"] is False
        assert found.json()["lost_location"] is None

        report = client.get(f"{PETS}/1/found-report").json()
        assert (report["pet_id"], report["finder_name"], report["found_location"]) == (1, "Bob", "5th Ave")

        update = client.put(f"{PETS}/1", json=REX, headers=bob)
        assert update.status_code == 403

        deleted = client.delete(f"{PETS}/1", headers=alice)
        assert deleted.status_code == 200
        assert deleted.json() == {"msg": "Pet with id 1 deleted"}
        assert client.get(f"{PETS}/1").status_code == 404


class TestInfoAndFailures:
    def test_info(self, client, alice):
        register(client, alice)

        info = client.get("/api/v1/info/").json()

        assert info["name"] == "Pet Registry API"
        assert info["pets"] == 1
        assert info["last_pet_id"] == 1

    def test_storage_failure_is_a_generic_500(self, client, monkeypatch):
        registry = client.app.state.registry

        def corrupted(pet_id):
            raise StorageCorruptionError("bad bytes")

        monkeypatch.setattr(registry.pets, "get", corrupted)

        response = client.get(f"{PETS}/1")

        assert response.status_code == 500
        assert response.json() == {"error": {"code": "internal_error", "message": "An internal error occurred"}}
