from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from todo_api.auth import create_access_token
from todo_api.errors import ConflictError, InvalidCredentialsError, NotFoundError
from todo_api.models import (
    LoginResponse,
    Todo,
    TodoCreate,
    TodoRead,
    TodoUpdate,
    User,
    UserCreate,
    UserRead,
)
from todo_api.repositories import TodoRepository, UserRepository
from todo_api.security import burn_verify, hash_password, verify_password

logger = logging.getLogger(__name__)


def public_user(user: User) -> UserRead:
    return UserRead.model_validate(user)


def public_todo(todo: Todo) -> TodoRead:
    return TodoRead.model_validate(todo)


class AuthService:
    """Signup, login and user lookups. Returns public views only."""

    def __init__(self, users: UserRepository) -> None:
        self.users = users

    def signup(self, data: UserCreate) -> UserRead:
        # Advisory only; the unique constraint on user.email decides
        if self.users.get_by_email(data.email) is not None:
            logger.info("Signup rejected, email already registered")
            raise ConflictError("user already exists")

        user = User(
            name=data.name,
            email=data.email,
            hashed_password=hash_password(data.password),
        )
        try:
            user = self.users.add(user)
        except IntegrityError as e:
            logger.info("Signup lost a race on email uniqueness")
            raise ConflictError("user already exists") from e
        logger.info(f"Created user {user.id}")
        return public_user(user)

    def login(self, email: str, password: str) -> LoginResponse:
        user = self.users.get_by_email(email)
        if user is None:
            burn_verify(password)
            raise InvalidCredentialsError()
        if not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError()

        token = create_access_token(user.id, user.email)
        logger.info(f"Issued token for user {user.id}")
        return LoginResponse(token=token, user=public_user(user))

    def get_user(self, user_id: uuid.UUID) -> UserRead:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("user not found")
        return public_user(user)

    def list_users(self) -> List[UserRead]:
        return [public_user(u) for u in self.users.list()]


class TodoService:
    """
    Todo operations in two families.

    The unscoped family (`create_todo`, `get_todo`, ...) acts on any record.
    The owner-scoped family (`*_for_user`) only ever sees records whose owner
    is the caller; a todo owned by someone else raises the same NotFoundError
    as one that does not exist.
    """

    def __init__(self, todos: TodoRepository) -> None:
        self.todos = todos

    # Unscoped family
    def create_todo(self, data: TodoCreate) -> TodoRead:
        return self._create(data, owner_id=None)

    def list_todos(self) -> List[TodoRead]:
        return [public_todo(t) for t in self.todos.list()]

    def get_todo(self, todo_id: uuid.UUID) -> TodoRead:
        return self._get(todo_id, owner_id=None)

    def update_todo(self, todo_id: uuid.UUID, data: TodoUpdate) -> TodoRead:
        return self._update(todo_id, data, owner_id=None)

    def toggle_todo(self, todo_id: uuid.UUID) -> TodoRead:
        return self._toggle(todo_id, owner_id=None)

    def delete_todo(self, todo_id: uuid.UUID) -> None:
        self._delete(todo_id, owner_id=None)

    # Owner-scoped family
    def create_for_user(self, owner_id: uuid.UUID, data: TodoCreate) -> TodoRead:
        return self._create(data, owner_id=owner_id)

    def list_for_user(self, owner_id: uuid.UUID) -> List[TodoRead]:
        return [public_todo(t) for t in self.todos.list(owner_id=owner_id)]

    def get_for_user(self, owner_id: uuid.UUID, todo_id: uuid.UUID) -> TodoRead:
        return self._get(todo_id, owner_id=owner_id)

    def update_for_user(self, owner_id: uuid.UUID, todo_id: uuid.UUID, data: TodoUpdate) -> TodoRead:
        return self._update(todo_id, data, owner_id=owner_id)

    def toggle_for_user(self, owner_id: uuid.UUID, todo_id: uuid.UUID) -> TodoRead:
        return self._toggle(todo_id, owner_id=owner_id)

    def delete_for_user(self, owner_id: uuid.UUID, todo_id: uuid.UUID) -> None:
        self._delete(todo_id, owner_id=owner_id)

    def _create(self, data: TodoCreate, owner_id: Optional[uuid.UUID]) -> TodoRead:
        todo = Todo(
            title=data.title,
            description=data.description,
            due_date=data.due_date,
            completed=False,
            owner_id=owner_id,
        )
        todo = self.todos.create(todo)
        logger.debug(f"Created todo {todo.id} for owner {owner_id}")
        return public_todo(todo)

    def _get(self, todo_id: uuid.UUID, owner_id: Optional[uuid.UUID]) -> TodoRead:
        todo = self.todos.get(todo_id, owner_id=owner_id)
        if todo is None:
            raise NotFoundError("todo not found")
        return public_todo(todo)

    def _update(self, todo_id: uuid.UUID, data: TodoUpdate, owner_id: Optional[uuid.UUID]) -> TodoRead:
        todo = self.todos.update(todo_id, data.changes(), owner_id=owner_id)
        if todo is None:
            raise NotFoundError("todo not found")
        return public_todo(todo)

    def _toggle(self, todo_id: uuid.UUID, owner_id: Optional[uuid.UUID]) -> TodoRead:
        todo = self.todos.toggle(todo_id, owner_id=owner_id)
        if todo is None:
            raise NotFoundError("todo not found")
        return public_todo(todo)

    def _delete(self, todo_id: uuid.UUID, owner_id: Optional[uuid.UUID]) -> None:
        if not self.todos.delete(todo_id, owner_id=owner_id):
            raise NotFoundError("todo not found")
        logger.debug(f"Deleted todo {todo_id}")
