"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with TASKTRACK_ prefix.
No config files: the signing secret and data paths all come from the
environment (12-factor app style).

Learn: The JWT secret deliberately has no default. A missing secret makes
Settings() fail at import time, so the server can never start signing
tokens with a well-known value.
"""

from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings

MIN_SECRET_LENGTH = 16


class Settings(BaseSettings):
    """All app configuration. Set via TASKTRACK_* env vars."""

    # Auth
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    bcrypt_rounds: int = 10

    # Storage
    data_dir: Path = Path("data")
    users_file: str = "users.json"
    tasks_file: str = "tasks.json"

    # Server
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = {"env_prefix": "TASKTRACK_"}

    @model_validator(mode="after")
    def validate_secret(self):
        """Reject blank secrets everywhere and short ones outside development."""
        if not self.jwt_secret.strip():
            raise ValueError("TASKTRACK_JWT_SECRET must not be blank")
        if (
            self.environment != "development"
            and len(self.jwt_secret) < MIN_SECRET_LENGTH
        ):
            raise ValueError(
                f"TASKTRACK_JWT_SECRET must be at least {MIN_SECRET_LENGTH} "
                "characters in non-development environments. Generate one with: "
                'python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        return self

    @property
    def users_path(self) -> Path:
        return self.data_dir / self.users_file

    @property
    def tasks_path(self) -> Path:
        return self.data_dir / self.tasks_file


# Singleton: import this everywhere
settings = Settings()
