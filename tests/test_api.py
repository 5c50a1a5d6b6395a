"""End-to-end tests through the HTTP surface, backed by SQLite."""

from typing import Any

import pytest
from fastapi.testclient import TestClient

HEADERS = {"Content-Type": "application/vnd.api+json", "Accept": "application/vnd.api+json"}


def _create(client: TestClient, plural: str, **sections: Any) -> dict:
    response = client.post(f"/v1/{plural}", json={"data": {"type": plural, **sections}}, headers=HEADERS)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def _person(client: TestClient, first_name: str = "Ada", **attributes: Any) -> dict:
    return _create(client, "people", attributes={"first_name": first_name, **attributes})


def test_root_redirects_to_the_versioned_index(client: TestClient) -> None:
    response = client.get("/", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/v1"


def test_versioned_index(client: TestClient) -> None:
    body = client.get("/v1").json()

    assert body["meta"] == {"api_version": "1"}
    assert body["links"]["people"] == {
        "href": "/v1/people",
        "meta": {"supported_actions": ["create", "read_one", "read_many", "update", "delete"]},
    }
    assert "delete" not in body["links"]["cats"]["meta"]["supported_actions"]


def test_create_and_read(client: TestClient) -> None:
    created = _person(client, last_name="Lovelace", age=36)

    response = client.get(f"/v1/people/{created['id']}", headers=HEADERS)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert response.headers["content-disposition"] == "inline"
    body = response.json()
    assert body["data"] == created
    assert body["data"]["attributes"] == {"first_name": "Ada", "last_name": "Lovelace", "age": 36}
    assert set(body["data"]["meta"]) == {"created_at", "updated_at"}
    assert body["links"] == {"self": f"/v1/people/{created['id']}"}


def test_unknown_attributes_are_ignored(client: TestClient) -> None:
    created = _person(client, password="hunter2")
    assert "password" not in created["attributes"]


def test_create_without_valid_fields(client: TestClient) -> None:
    response = client.post(
        "/v1/people",
        json={"data": {"type": "people", "attributes": {"nickname": "Ada"}}},
        headers=HEADERS,
    )

    assert response.status_code == 422
    assert response.json()["errors"][0]["title"] == "No Valid Fields"


def test_create_with_invalid_body(client: TestClient) -> None:
    response = client.post("/v1/people", content=b"{not json", headers=HEADERS)

    assert response.status_code == 400
    assert response.json()["errors"][0]["title"] == "Validation Error"


def test_read_many_paginates(client: TestClient) -> None:
    for number in range(15):
        _person(client, f"person-{number}")

    first = client.get("/v1/people").json()
    second = client.get("/v1/people", params={"page[number]": "2"}).json()

    assert len(first["data"]) == 10
    assert len(second["data"]) == 5
    assert second["meta"] == {"page_number": 2, "page_size": 10, "total_count": 15}
    assert "next" not in second["links"]
    assert first["links"]["next"] == "/v1/people?page[number]=2&page[size]=10"
    ids = [item["id"] for item in first["data"] + second["data"]]
    assert ids == sorted(ids, key=int)


def test_read_many_past_the_last_page(client: TestClient) -> None:
    _person(client)

    body = client.get("/v1/people", params={"page[number]": "4"}).json()

    assert body["data"] == []
    assert body["meta"]["total_count"] == 1


def test_sparse_fieldsets(client: TestClient) -> None:
    created = _person(client, last_name="Lovelace")

    body = client.get(f"/v1/people/{created['id']}", params={"fields[people]": "last_name"}).json()

    assert body["data"]["attributes"] == {"last_name": "Lovelace"}
    assert set(body["data"]["meta"]) == {"created_at", "updated_at"}


def test_sparse_fieldsets_without_known_fields(client: TestClient) -> None:
    response = client.get("/v1/people", params={"fields[people]": "nonexistent"})

    assert response.status_code == 422
    assert "data" not in response.json()


def test_update(client: TestClient) -> None:
    created = _person(client, last_name="Lovelace")

    response = client.patch(
        f"/v1/people/{created['id']}",
        json={"data": {"type": "people", "id": created["id"], "attributes": {"last_name": "King"}}},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["data"]["attributes"]["last_name"] == "King"
    assert response.json()["data"]["attributes"]["first_name"] == "Ada"


def test_update_without_valid_fields_returns_the_resource(client: TestClient) -> None:
    created = _person(client)
    url = f"/v1/people/{created['id']}"

    updated = client.patch(url, json={"data": {"type": "people", "attributes": {"nope": 1}}})

    assert updated.status_code == 200
    assert updated.json() == client.get(url).json()


def test_update_missing_resource(client: TestClient) -> None:
    response = client.patch(
        "/v1/people/999", json={"data": {"type": "people", "attributes": {"last_name": "King"}}}
    )
    assert response.status_code == 404


def test_delete(client: TestClient) -> None:
    created = _person(client)

    response = client.delete(f"/v1/people/{created['id']}")

    assert response.status_code == 204
    assert response.content == b""
    assert client.get(f"/v1/people/{created['id']}").status_code == 404


def test_delete_missing_resource(client: TestClient) -> None:
    response = client.delete("/v1/people/999")

    assert response.status_code == 404
    assert response.json()["errors"] == [
        {
            "status": "404",
            "title": "Resource Not Found",
            "detail": "The requested resource does not exist.",
        }
    ]


@pytest.mark.parametrize("row_id", ["abc", "\u00b2", "9" * 23, str(2**63)])
def test_unusable_ids_are_not_found(client: TestClient, row_id: str) -> None:
    response = client.get(f"/v1/people/{row_id}")

    assert response.status_code == 404
    assert response.json()["errors"][0]["title"] == "Resource Not Found"


def test_collection_delete_is_not_allowed(client: TestClient) -> None:
    response = client.delete("/v1/people")

    assert response.status_code == 405
    body = response.json()
    assert body["errors"][0]["title"] == "Method Not Allowed"
    assert body["links"] == {"self": "/v1/people"}


def test_disabled_action_is_not_allowed(client: TestClient) -> None:
    cat = _create(client, "cats", attributes={"name": "James"})

    response = client.delete(f"/v1/cats/{cat['id']}")

    assert response.status_code == 405
    assert client.get(f"/v1/cats/{cat['id']}").status_code == 200


def test_relationships(client: TestClient) -> None:
    owner = _person(client)
    cat = _create(
        client,
        "cats",
        attributes={"name": "James"},
        meta={"mood": "grumpy"},
        relationships={"owner": {"data": {"type": "people", "id": owner["id"]}}},
    )
    stray = _create(client, "cats", attributes={"name": "Tom"})

    assert cat["meta"]["mood"] == "grumpy"
    assert cat["relationships"]["owner"] == {
        "data": {"type": "people", "id": owner["id"]},
        "links": {
            "self": f"/v1/cats/{cat['id']}/relationships/owner",
            "related": f"/v1/cats/{cat['id']}/owner",
        },
    }
    assert "relationships" not in stray


def test_unknown_route(client: TestClient) -> None:
    response = client.get("/v1/dogs")

    assert response.status_code == 404
    assert response.json()["errors"][0]["title"] == "Not Found"
    assert response.json()["links"] == {"self": "/v1/dogs"}


def test_request_id_is_echoed(client: TestClient) -> None:
    response = client.get("/v1/people", headers={"X-Request-ID": "abc-123"})

    assert response.headers["x-request-id"] == "abc-123"
    assert client.get("/v1/people").headers["x-request-id"]


@pytest.mark.parametrize("value", ["²", "9" * 23, "9" * 5000])
def test_unusable_page_values_use_the_defaults(client: TestClient, value: str) -> None:
    for number in range(12):
        _person(client, f"person-{number}")

    response = client.get("/v1/people", params={"page[number]": value, "page[size]": value})

    assert response.status_code == 200
    assert response.json()["meta"] == {"page_number": 1, "page_size": 10, "total_count": 12}
    assert len(response.json()["data"]) == 10
