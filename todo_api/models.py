import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import AliasChoices, BaseModel, field_validator
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Due dates without an offset are taken as UTC; date-only input is already midnight."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _clean_title(v: str) -> str:
    s = v.strip()
    if not (1 <= len(s) <= 200):
        raise ValueError("title length must be between 1 and 200 characters")
    return s


def _clean_email(v: str) -> str:
    s = v.strip().lower()
    if "@" not in s or s.startswith("@") or s.endswith("@"):
        raise ValueError("email is not a valid address")
    return s


# Database Tables
class User(SQLModel, table=True):
    """User account with hashed password. Never returned to callers as-is."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    email: str = Field(unique=True, index=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Todo(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str = Field(index=True, max_length=200)
    description: str | None = Field(default=None)
    completed: bool = Field(default=False)
    due_date: datetime | None = Field(default=None)
    owner_id: uuid.UUID | None = Field(default=None, foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)


# Public views
class UserRead(SQLModel):
    """Response model - the only user shape that leaves the auth service."""
    id: uuid.UUID
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


class TodoRead(SQLModel):
    id: uuid.UUID
    title: str
    description: str | None
    completed: bool
    due_date: datetime | None
    owner_id: uuid.UUID | None
    created_at: datetime
    updated_at: datetime


class LoginResponse(SQLModel):
    token: str
    user: UserRead


# Request bodies
class UserCreate(BaseModel):
    """Request model for user signup."""
    name: str = PydanticField(min_length=1, max_length=100)
    email: str = PydanticField(min_length=3, max_length=255)
    password: str = PydanticField(min_length=1)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _clean_email(v)


class LoginRequest(BaseModel):
    email: str = PydanticField(min_length=1)
    password: str = PydanticField(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        # Unknown addresses must fail as invalid credentials, not as a 400
        return v.strip().lower()


class TodoCreate(BaseModel):
    title: str = PydanticField(description="Short title for the todo item")
    description: Optional[str] = None
    due_date: Optional[datetime] = PydanticField(
        default=None, validation_alias=AliasChoices("due_date", "dueDate")
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("due_date")
    @classmethod
    def due_date_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)


class TodoUpdate(BaseModel):
    """
    Partial update. Absent fields are left alone; present fields overwrite,
    `null` included for description and due_date. Completion is changed only
    by the toggle endpoint.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = PydanticField(
        default=None, validation_alias=AliasChoices("due_date", "dueDate")
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("title cannot be null")
        return _clean_title(v)

    @field_validator("due_date")
    @classmethod
    def due_date_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)

    def changes(self) -> dict:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)
