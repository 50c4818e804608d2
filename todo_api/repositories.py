"""
Storage collaborators for users and todos.

Every todo operation takes an optional `owner_id`. When given, the statement
is additionally constrained by `owner_id`, so a todo owned by someone else
behaves exactly like a missing one. Update, toggle and delete are single
conditional statements; the affected-row count decides whether they happened.
"""
from __future__ import annotations

import uuid
from typing import Any, List, Optional

from sqlalchemy import delete, not_, update
from sqlmodel import Session, select

from todo_api.models import Todo, User, utcnow


class UserRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_email(self, email: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.email == email)).first()

    def get(self, user_id: uuid.UUID) -> Optional[User]:
        return self.session.get(User, user_id)

    def list(self) -> List[User]:
        return list(self.session.exec(select(User).order_by(User.created_at)).all())

    def add(self, user: User) -> User:
        """Insert a user. The unique email constraint raises IntegrityError on duplicates."""
        self.session.add(user)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(user)
        return user


class TodoRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _scoped(self, statement, todo_id: uuid.UUID, owner_id: Optional[uuid.UUID]):
        statement = statement.where(Todo.id == todo_id)
        if owner_id is not None:
            statement = statement.where(Todo.owner_id == owner_id)
        return statement

    def create(self, todo: Todo) -> Todo:
        self.session.add(todo)
        self.session.commit()
        self.session.refresh(todo)
        return todo

    def list(self, owner_id: Optional[uuid.UUID] = None) -> List[Todo]:
        statement = select(Todo)
        if owner_id is not None:
            statement = statement.where(Todo.owner_id == owner_id)
        statement = statement.order_by(Todo.created_at.desc())
        return list(self.session.exec(statement).all())

    def get(self, todo_id: uuid.UUID, owner_id: Optional[uuid.UUID] = None) -> Optional[Todo]:
        # Bypass the identity map so a row changed by a bulk statement is re-read
        statement = self._scoped(select(Todo), todo_id, owner_id).execution_options(
            populate_existing=True
        )
        return self.session.exec(statement).first()

    def update(
        self, todo_id: uuid.UUID, fields: dict[str, Any], owner_id: Optional[uuid.UUID] = None
    ) -> Optional[Todo]:
        """Overwrite the given fields and refresh updated_at. None if no row matched."""
        values = dict(fields)
        values["updated_at"] = utcnow()
        statement = self._scoped(update(Todo), todo_id, owner_id).values(**values)
        return self._write_then_read(statement, todo_id, owner_id)

    def toggle(self, todo_id: uuid.UUID, owner_id: Optional[uuid.UUID] = None) -> Optional[Todo]:
        statement = self._scoped(update(Todo), todo_id, owner_id).values(
            completed=not_(Todo.completed), updated_at=utcnow()
        )
        return self._write_then_read(statement, todo_id, owner_id)

    def delete(self, todo_id: uuid.UUID, owner_id: Optional[uuid.UUID] = None) -> bool:
        statement = self._scoped(delete(Todo), todo_id, owner_id)
        result = self.session.exec(statement)
        self.session.commit()
        return result.rowcount > 0

    def _write_then_read(self, statement, todo_id: uuid.UUID, owner_id: Optional[uuid.UUID]) -> Optional[Todo]:
        result = self.session.exec(statement.execution_options(synchronize_session=False))
        self.session.commit()
        if result.rowcount == 0:
            return None
        # A delete may land between commit and read; the caller sees None then
        return self.get(todo_id, owner_id)
