import pytest
from fastapi.testclient import TestClient

import api
from library import Library


def test_get_books(client):
    response = client.get("/books")
    assert response.status_code == 200
    data = response.json()
    assert isinstance(data, list)
    assert [b["id"] for b in data] == ["1", "2", "3"]
    assert data[0] == {
        "id": "1",
        "title": "In Search of Lost Time",
        "author": "Marcel Proust",
        "quantity": 2,
    }


def test_responses_are_indented(client):
    response = client.get("/books/1")
    assert response.headers["content-type"].startswith("application/json")
    assert response.text.startswith('{\n    "id": "1",')


def test_get_book(client):
    response = client.get("/books/3")
    assert response.status_code == 200
    assert response.json()["title"] == "War and Peace"


def test_get_book_not_found(client):
    response = client.get("/books/99")
    assert response.status_code == 404
    assert response.json() == {"message": "Book not found."}


def test_create_book(client, lib):
    payload = {"id": "4", "title": "Hamlet", "author": "William Shakespeare", "quantity": 2}
    response = client.post("/books", json=payload)
    assert response.status_code == 201
    assert response.json() == payload

    response = client.get("/books/4")
    assert response.status_code == 200
    assert response.json() == payload
    assert len(lib) == 4


def test_create_book_appends_to_list(client):
    client.post("/books", json={"id": "4", "title": "Hamlet", "author": "William Shakespeare", "quantity": 2})
    ids = [b["id"] for b in client.get("/books").json()]
    assert ids == ["1", "2", "3", "4"]


def test_create_book_missing_fields_take_zero_values(client):
    response = client.post("/books", json={"id": "5"})
    assert response.status_code == 201
    assert response.json() == {"id": "5", "title": "", "author": "", "quantity": 0}


def test_create_book_ignores_unknown_fields(client):
    response = client.post("/books", json={"id": "6", "title": "T", "author": "A", "quantity": 1, "isbn": "123"})
    assert response.status_code == 201
    assert "isbn" not in response.json()


def test_create_duplicate_id_is_accepted(client):
    response = client.post("/books", json={"id": "1", "title": "Copy", "author": "Other", "quantity": 1})
    assert response.status_code == 201
    assert len(client.get("/books").json()) == 4
    # First match still wins on lookup
    assert client.get("/books/1").json()["title"] == "In Search of Lost Time"


@pytest.mark.parametrize(
    "body",
    [
        "{not json",
        "[]",
        '"just a string"',
        '{"id": "7", "quantity": "2"}',
        '{"id": 7}',
        '{"id": "7", "quantity": 1.5}',
        '{"id": "7", "quantity": true}',
    ],
)
def test_create_book_malformed_body(client, lib, body):
    response = client.post("/books", content=body, headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.content == b""
    assert len(lib) == 3


def test_create_book_without_body(client):
    response = client.post("/books")
    assert response.status_code == 400
    assert response.content == b""


def test_checkout_book(client):
    response = client.patch("/checkout", params={"id": "1"})
    assert response.status_code == 200
    assert response.json()["quantity"] == 1
    assert client.get("/books/1").json()["quantity"] == 1


def test_checkout_until_no_books_left(client):
    assert client.patch("/checkout?id=1").json()["quantity"] == 1
    assert client.patch("/checkout?id=1").json()["quantity"] == 0

    response = client.patch("/checkout?id=1")
    assert response.status_code == 400
    assert response.json() == {"message": "No more books left"}
    assert client.get("/books/1").json()["quantity"] == 0


def test_checkout_not_found(client):
    response = client.patch("/checkout?id=99")
    assert response.status_code == 404
    assert response.json() == {"message": "Book not found"}


def test_checkout_missing_id(client):
    response = client.patch("/checkout")
    assert response.status_code == 400
    assert response.json() == {"message": "Missing id query parameter"}


def test_checkout_empty_id_is_not_found(client):
    response = client.patch("/checkout?id=")
    assert response.status_code == 404


def test_return_book(client):
    response = client.patch("/return", params={"id": "2"})
    assert response.status_code == 200
    assert response.json()["quantity"] == 6


def test_checkout_then_return_round_trip(client):
    client.patch("/checkout?id=3")
    response = client.patch("/return?id=3")
    assert response.json()["quantity"] == 6


def test_return_not_found(client):
    response = client.patch("/return?id=99")
    assert response.status_code == 404
    assert response.json() == {"message": "Book not found"}


def test_return_missing_id(client):
    response = client.patch("/return")
    assert response.status_code == 400
    assert response.json() == {"message": "Missing id query parameter"}


def test_wrong_method_is_rejected(client):
    response = client.get("/checkout?id=1")
    assert response.status_code == 405
    assert "message" in response.json()
    assert client.get("/books/1").json()["quantity"] == 2


def test_unknown_route(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["total_books"] == 3
    assert "timestamp" in data


def test_apps_do_not_share_state():
    first = TestClient(api.create_app(Library(seed=True)))
    second = TestClient(api.create_app(Library(seed=True)))
    first.patch("/checkout?id=1")
    assert first.get("/books/1").json()["quantity"] == 1
    assert second.get("/books/1").json()["quantity"] == 2


def test_create_app_builds_its_own_library():
    app = api.create_app()
    assert isinstance(app.state.library, Library)
