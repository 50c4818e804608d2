import uuid
from functools import lru_cache
from typing import Annotated, Literal

import httpx
from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from todo_api.auth import decode_token, subject_from_claims
from todo_api.config import get_settings
from todo_api.database import SessionDep
from todo_api.errors import UnauthenticatedError
from todo_api.repositories import TodoRepository, UserRepository
from todo_api.services import AuthService, TodoService
from todo_api.sources import LocalTodoSource, OnlineTodoSource, TodoSource

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> uuid.UUID:
    """
    Validate the bearer token and bind the caller's id to the request.

    Raises UnauthenticatedError (401) for a missing or malformed header, a bad
    signature, an expired token, a disallowed algorithm or a malformed subject.
    The handler does not run in any of those cases.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("missing or invalid authorization header")
    claims = decode_token(credentials.credentials)
    user_id = subject_from_claims(claims)
    request.state.user_id = user_id
    return user_id


CurrentUserIdDep = Annotated[uuid.UUID, Depends(get_current_user_id)]


def get_auth_service(session: SessionDep) -> AuthService:
    return AuthService(UserRepository(session))


def get_todo_service(session: SessionDep) -> TodoService:
    return TodoService(TodoRepository(session))


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
TodoServiceDep = Annotated[TodoService, Depends(get_todo_service)]


@lru_cache
def get_online_client() -> httpx.Client:
    settings = get_settings()
    return httpx.Client(
        base_url=settings.online_base_url,
        timeout=settings.online_timeout_seconds,
        headers={"Accept": "application/json"},
    )


def get_todo_source(
    user_id: CurrentUserIdDep,
    service: TodoServiceDep,
    online_client: Annotated[httpx.Client, Depends(get_online_client)],
    source: Annotated[
        Literal["local", "online"],
        Query(description="'local' for your own todos, 'online' to proxy dummyjson.com"),
    ] = "local",
) -> TodoSource:
    if source == "online":
        return OnlineTodoSource(online_client)
    return LocalTodoSource(service, user_id)


TodoSourceDep = Annotated[TodoSource, Depends(get_todo_source)]
