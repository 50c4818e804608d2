from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings read from the environment (and `.env`).

    `jwt_secret` has no default: the app refuses to start without one.
    """

    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 24
    database_url: str = "sqlite:///./todos.db"
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    run_mode: Literal["debug", "release", "test"] = "release"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    online_base_url: str = "https://dummyjson.com"
    online_timeout_seconds: float = 10.0

    class Config:
        env_file = ".env"

    @field_validator("jwt_secret")
    @classmethod
    def secret_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("JWT_SECRET must not be empty")
        return v

    @field_validator("jwt_algorithm")
    @classmethod
    def symmetric_algorithm(cls, v: str) -> str:
        if v not in {"HS256", "HS384", "HS512"}:
            raise ValueError("JWT_ALGORITHM must be one of HS256, HS384, HS512")
        return v

    @property
    def debug(self) -> bool:
        return self.run_mode == "debug"


@lru_cache
def get_settings() -> Settings:
    return Settings()
