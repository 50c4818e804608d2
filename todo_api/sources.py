"""
Where todo requests are served from.

`LocalTodoSource` serves the caller's own todos from the database.
`OnlineTodoSource` passes requests through to the public dummyjson.com todo
API and returns its JSON unchanged. Routers pick one per request from the
`source` query parameter.
"""
from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from todo_api.errors import NotFoundError, NotSupportedError, UpstreamError, ValidationError
from todo_api.models import TodoCreate, TodoUpdate
from todo_api.services import TodoService

logger = logging.getLogger(__name__)


class TodoSource(ABC):
    @abstractmethod
    def list(self) -> Any:
        """Return the caller's todos."""

    @abstractmethod
    def get(self, todo_id: str) -> Any:
        """Return one todo or raise NotFoundError."""

    @abstractmethod
    def create(self, data: TodoCreate) -> Any:
        """Create a todo and return it."""

    @abstractmethod
    def update(self, todo_id: str, data: TodoUpdate) -> Any:
        """Apply a partial update and return the todo."""

    @abstractmethod
    def delete(self, todo_id: str) -> Optional[Any]:
        """Delete a todo. Returns a body to send back, or None for 204."""

    @abstractmethod
    def toggle(self, todo_id: str) -> Any:
        """Flip the completed flag and return the todo."""


def parse_todo_id(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError as e:
        raise ValidationError("invalid id") from e


class LocalTodoSource(TodoSource):
    def __init__(self, service: TodoService, owner_id: uuid.UUID) -> None:
        self.service = service
        self.owner_id = owner_id

    def list(self):
        return self.service.list_for_user(self.owner_id)

    def get(self, todo_id: str):
        return self.service.get_for_user(self.owner_id, parse_todo_id(todo_id))

    def create(self, data: TodoCreate):
        return self.service.create_for_user(self.owner_id, data)

    def update(self, todo_id: str, data: TodoUpdate):
        return self.service.update_for_user(self.owner_id, parse_todo_id(todo_id), data)

    def delete(self, todo_id: str) -> None:
        self.service.delete_for_user(self.owner_id, parse_todo_id(todo_id))
        return None

    def toggle(self, todo_id: str):
        return self.service.toggle_for_user(self.owner_id, parse_todo_id(todo_id))


class OnlineTodoSource(TodoSource):
    def __init__(self, client: httpx.Client) -> None:
        self.client = client

    def _call(self, method: str, path: str, json: Optional[dict] = None) -> Any:
        try:
            response = self.client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.warning(f"Upstream {method} {path} failed: {e}")
            raise UpstreamError(f"upstream request failed: {e}") from e
        if response.status_code == 404:
            raise NotFoundError("todo not found")
        if response.is_error:
            logger.warning(f"Upstream {method} {path} returned {response.status_code}")
            raise UpstreamError(f"upstream returned {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError("upstream returned invalid JSON") from e

    @staticmethod
    def _body(data: TodoCreate | TodoUpdate) -> dict:
        body = data.model_dump(mode="json", exclude_unset=True)
        if "title" in body:
            # dummyjson names the title field "todo"
            body["todo"] = body.pop("title")
        return body

    def list(self):
        return self._call("GET", "/todos")

    def get(self, todo_id: str):
        return self._call("GET", f"/todos/{todo_id}")

    def create(self, data: TodoCreate):
        body = self._body(data)
        body.setdefault("completed", False)
        # dummyjson requires a user id; the local identity is not meaningful upstream
        body.setdefault("userId", 1)
        return self._call("POST", "/todos/add", json=body)

    def update(self, todo_id: str, data: TodoUpdate):
        return self._call("PUT", f"/todos/{todo_id}", json=self._body(data))

    def delete(self, todo_id: str):
        return self._call("DELETE", f"/todos/{todo_id}")

    def toggle(self, todo_id: str):
        raise NotSupportedError("toggle complete not supported on the online source")
