import time
import uuid
from datetime import datetime

from fastapi.testclient import TestClient

from conftest import API

TODOS = f"{API}/todos"


def test_health(anon_client: TestClient):
    response = anon_client.get(f"{API}/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "message": "Todo API is running"}
    assert "X-Process-Time" in response.headers


def test_create_todo(client: TestClient):
    """Test creating a new todo."""
    response = client.post(
        f"{TODOS}/",
        json={"title": "Test Todo", "description": "Test description"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Test Todo"
    assert data["description"] == "Test description"
    assert data["completed"] is False
    assert data["due_date"] is None
    uuid.UUID(data["id"])
    assert "created_at" in data
    assert "updated_at" in data


def test_create_todo_minimal(client: TestClient):
    """Test creating a todo with only required fields."""
    response = client.post(f"{TODOS}/", json={"title": "Minimal Todo"})
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Minimal Todo"
    assert data["description"] is None
    assert data["completed"] is False


def test_create_todo_sets_owner(client: TestClient):
    me = client.get(f"{API}/users/me").json()
    response = client.post(f"{TODOS}/", json={"title": "Mine"})
    assert response.json()["owner_id"] == me["id"]


def test_create_todo_ignores_completed(client: TestClient):
    response = client.post(f"{TODOS}/", json={"title": "Done already?", "completed": True})
    assert response.status_code == 201
    assert response.json()["completed"] is False


def test_create_todo_due_date_aliases(client: TestClient):
    snake = client.post(f"{TODOS}/", json={"title": "Pay bills", "due_date": "2099-12-25"})
    camel = client.post(f"{TODOS}/", json={"title": "Pay rent", "dueDate": "2099-12-26T09:30:00"})
    assert snake.status_code == 201
    assert camel.status_code == 201
    # Date-only input is promoted to midnight
    assert snake.json()["due_date"].startswith("2099-12-25T00:00:00")
    assert camel.json()["due_date"].startswith("2099-12-26T09:30:00")


def test_due_date_without_offset(client: TestClient):
    created = client.post(f"{TODOS}/", json={"title": "Naive", "due_date": "2099-12-25T09:30:00"})
    assert created.status_code == 201
    assert created.json()["due_date"].startswith("2099-12-25T09:30:00")

    updated = client.put(f"{TODOS}/{created.json()['id']}", json={"dueDate": "2100-01-02"})
    assert updated.status_code == 200
    assert updated.json()["due_date"].startswith("2100-01-02T00:00:00")


def test_due_date_with_offset(client: TestClient):
    response = client.post(f"{TODOS}/", json={"title": "Aware", "due_date": "2099-01-01T10:00:00+02:00"})
    assert response.status_code == 201


def test_create_todo_requires_title(client: TestClient):
    response = client.post(f"{TODOS}/", json={"description": "no title"})
    assert response.status_code == 400
    assert "title" in response.json()["error"]


def test_create_todo_blank_title(client: TestClient):
    response = client.post(f"{TODOS}/", json={"title": "   "})
    assert response.status_code == 400
    assert "error" in response.json()


def test_create_todo_bad_due_date(client: TestClient):
    response = client.post(f"{TODOS}/", json={"title": "x", "due_date": "not-a-date"})
    assert response.status_code == 400


def test_list_todos(client: TestClient):
    """Test listing all todos, newest first."""
    client.post(f"{TODOS}/", json={"title": "Todo 1"})
    time.sleep(0.002)
    client.post(f"{TODOS}/", json={"title": "Todo 2"})

    response = client.get(f"{TODOS}/")
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 2
    assert data[0]["title"] == "Todo 2"
    assert data[1]["title"] == "Todo 1"


def test_list_todos_empty(client: TestClient):
    """Test listing todos when none exist."""
    response = client.get(f"{TODOS}/")
    assert response.status_code == 200
    assert response.json() == []


def test_get_todo(client: TestClient):
    """Test getting a single todo by ID."""
    create_response = client.post(
        f"{TODOS}/", json={"title": "Get Me", "description": "Find this todo"}
    )
    todo_id = create_response.json()["id"]

    response = client.get(f"{TODOS}/{todo_id}")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == todo_id
    assert data["title"] == "Get Me"
    assert data["description"] == "Find this todo"


def test_get_nonexistent_todo(client: TestClient):
    """Test getting a todo that doesn't exist."""
    response = client.get(f"{TODOS}/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json() == {"error": "todo not found"}


def test_get_todo_malformed_id(client: TestClient):
    response = client.get(f"{TODOS}/9999")
    assert response.status_code == 400
    assert response.json() == {"error": "invalid id"}


def test_update_todo_partial(client: TestClient):
    """Only the supplied fields change."""
    create_response = client.post(
        f"{TODOS}/",
        json={"title": "Original Title", "description": "Original desc", "due_date": "2099-01-01"},
    )
    original = create_response.json()

    response = client.put(f"{TODOS}/{original['id']}", json={"title": "Updated Title"})
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Updated Title"
    assert data["description"] == "Original desc"
    assert data["due_date"] == original["due_date"]
    assert data["completed"] is False


def test_update_todo_explicit_null_clears(client: TestClient):
    create_response = client.post(
        f"{TODOS}/", json={"title": "Clear me", "description": "desc", "due_date": "2099-01-01"}
    )
    todo_id = create_response.json()["id"]

    response = client.put(f"{TODOS}/{todo_id}", json={"description": None, "dueDate": None})
    assert response.status_code == 200
    data = response.json()
    assert data["description"] is None
    assert data["due_date"] is None
    assert data["title"] == "Clear me"


def test_update_todo_empty_description(client: TestClient):
    todo_id = client.post(f"{TODOS}/", json={"title": "t", "description": "desc"}).json()["id"]
    response = client.put(f"{TODOS}/{todo_id}", json={"description": ""})
    assert response.json()["description"] == ""


def test_update_todo_rejects_null_title(client: TestClient):
    todo_id = client.post(f"{TODOS}/", json={"title": "Keep"}).json()["id"]
    response = client.put(f"{TODOS}/{todo_id}", json={"title": None})
    assert response.status_code == 400
    assert client.get(f"{TODOS}/{todo_id}").json()["title"] == "Keep"


def test_update_does_not_change_completion(client: TestClient):
    todo_id = client.post(f"{TODOS}/", json={"title": "Stay open"}).json()["id"]
    response = client.put(f"{TODOS}/{todo_id}", json={"completed": True, "description": "x"})
    assert response.status_code == 200
    assert response.json()["completed"] is False


def test_update_refreshes_updated_at(client: TestClient):
    created = client.post(f"{TODOS}/", json={"title": "Stamp"}).json()
    time.sleep(0.002)
    updated = client.put(f"{TODOS}/{created['id']}", json={"description": "new"}).json()
    assert datetime.fromisoformat(updated["updated_at"]) > datetime.fromisoformat(created["updated_at"])
    assert updated["created_at"] == created["created_at"]


def test_update_nonexistent_todo(client: TestClient):
    """Test updating a todo that doesn't exist."""
    response = client.put(f"{TODOS}/{uuid.uuid4()}", json={"title": "Won't Work"})
    assert response.status_code == 404
    assert response.json()["error"] == "todo not found"


def test_toggle_todo(client: TestClient):
    todo_id = client.post(f"{TODOS}/", json={"title": "Flip me"}).json()["id"]

    first = client.patch(f"{TODOS}/{todo_id}/complete")
    assert first.status_code == 200
    assert first.json()["completed"] is True

    second = client.patch(f"{TODOS}/{todo_id}/complete")
    assert second.json()["completed"] is False
    assert second.json()["title"] == "Flip me"


def test_toggle_nonexistent_todo(client: TestClient):
    response = client.patch(f"{TODOS}/{uuid.uuid4()}/complete")
    assert response.status_code == 404


def test_delete_todo(client: TestClient):
    """Test deleting a todo."""
    create_response = client.post(f"{TODOS}/", json={"title": "Delete Me"})
    todo_id = create_response.json()["id"]

    response = client.delete(f"{TODOS}/{todo_id}")
    assert response.status_code == 204
    assert response.text == ""

    get_response = client.get(f"{TODOS}/{todo_id}")
    assert get_response.status_code == 404


def test_deleted_todo_is_gone_for_every_operation(client: TestClient):
    todo_id = client.post(f"{TODOS}/", json={"title": "Gone"}).json()["id"]
    assert client.delete(f"{TODOS}/{todo_id}").status_code == 204

    assert client.get(f"{TODOS}/{todo_id}").status_code == 404
    assert client.put(f"{TODOS}/{todo_id}", json={"title": "x"}).status_code == 404
    assert client.patch(f"{TODOS}/{todo_id}/complete").status_code == 404
    assert client.delete(f"{TODOS}/{todo_id}").status_code == 404


def test_delete_nonexistent_todo(client: TestClient):
    """Test deleting a todo that doesn't exist."""
    response = client.delete(f"{TODOS}/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["error"] == "todo not found"
